import asyncio

import pytest

from idstore.errors import ConflictError, NotFoundError
from idstore.usrsys.storage import UserRecordStorage, merge_update
from idstore.usrsys.usr import UserRecord, UserUpdate


class TestMergeUpdate:
    def setup_method(self):
        self.record = UserRecord(
            email="a@b.com",
            first_name="A",
            last_name="B",
            phone="+998900000000",
            address="X",
            password_hash="$argon2id$old",
        )

    def test_only_given_fields_change(self):
        merged = merge_update(self.record, UserUpdate(phone="+111"))
        assert merged.phone == "+111"
        assert merged.first_name == "A"
        assert merged.last_name == "B"
        assert merged.address == "X"
        assert merged.password_hash == "$argon2id$old"

    def test_password_hash_replaced_when_given(self):
        merged = merge_update(
            self.record, UserUpdate(password="newpass1"), "$argon2id$new"
        )
        assert merged.password_hash == "$argon2id$new"

    def test_original_record_is_untouched(self):
        merge_update(self.record, UserUpdate(first_name="Z"))
        assert self.record.first_name == "A"

    def test_email_is_kept(self):
        merged = merge_update(self.record, UserUpdate(first_name="Z"))
        assert merged.email == "a@b.com"


class TestUserRecordStorage:
    @pytest.mark.asyncio
    async def test_create_new_user(self, user_records: UserRecordStorage, make_form):
        record = await user_records.create_new_user(make_form())
        assert record.password_hash
        assert record.password_hash != "secret1"
        assert await user_records.exists("a@b.com")
        stored = await user_records.get("a@b.com")
        assert stored == record

    @pytest.mark.asyncio
    async def test_stored_hash_verifies_only_the_original_password(
        self, user_records: UserRecordStorage, make_form
    ):
        await user_records.create_new_user(make_form())
        assert await user_records.check_user_password("a@b.com", "secret1") is True
        assert await user_records.check_user_password("a@b.com", "secret2") is False
        assert await user_records.check_user_password("x@b.com", "secret1") is None

    @pytest.mark.asyncio
    async def test_email_is_case_sensitive(
        self, user_records: UserRecordStorage, make_form
    ):
        await user_records.create_new_user(make_form(email="a@b.com"))
        await user_records.create_new_user(make_form(email="A@b.com"))
        assert await user_records.exists("A@b.com")

    @pytest.mark.asyncio
    async def test_create_twice_is_conflict(
        self, user_records: UserRecordStorage, make_form
    ):
        await user_records.create_new_user(make_form())
        with pytest.raises(ConflictError):
            await user_records.create_new_user(make_form(password="another1"))
        assert await user_records.check_user_password("a@b.com", "secret1")

    @pytest.mark.asyncio
    async def test_concurrent_creates_store_one_record(
        self, user_records: UserRecordStorage, make_form
    ):
        results = await asyncio.gather(
            *(
                user_records.create_new_user(make_form(password="secret{}".format(i)))
                for i in range(5)
            ),
            return_exceptions=True,
        )
        created = [r for r in results if isinstance(r, UserRecord)]
        conflicts = [r for r in results if isinstance(r, ConflictError)]
        assert len(created) == 1
        assert len(conflicts) == 4
        profiles = [p async for p in user_records.list_all()]
        assert len(profiles) == 1
        stored = await user_records.get("a@b.com")
        assert stored == created[0]

    @pytest.mark.asyncio
    async def test_update_phone_only(self, user_records: UserRecordStorage, make_form):
        before = await user_records.create_new_user(make_form())
        await user_records.update("a@b.com", UserUpdate(phone="+111"))
        after = await user_records.get("a@b.com")
        assert after
        assert after.phone == "+111"
        assert after.first_name == before.first_name
        assert after.last_name == before.last_name
        assert after.address == before.address
        assert after.password_hash == before.password_hash

    @pytest.mark.asyncio
    async def test_update_password(self, user_records: UserRecordStorage, make_form):
        await user_records.create_new_user(make_form())
        await user_records.update("a@b.com", UserUpdate(password="newpass1"))
        assert not await user_records.check_user_password("a@b.com", "secret1")
        assert await user_records.check_user_password("a@b.com", "newpass1")

    @pytest.mark.asyncio
    async def test_update_missing_user(self, user_records: UserRecordStorage):
        with pytest.raises(NotFoundError):
            await user_records.update("a@b.com", UserUpdate(phone="+111"))
        assert not await user_records.exists("a@b.com")

    @pytest.mark.asyncio
    async def test_concurrent_updates_keep_each_other(
        self, user_records: UserRecordStorage, make_form
    ):
        await user_records.create_new_user(make_form())
        await asyncio.gather(
            user_records.update("a@b.com", UserUpdate(phone="+111")),
            user_records.update("a@b.com", UserUpdate(address="Y")),
            user_records.update("a@b.com", UserUpdate(first_name="C")),
        )
        record = await user_records.get("a@b.com")
        assert record
        assert (record.phone, record.address, record.first_name) == ("+111", "Y", "C")

    @pytest.mark.asyncio
    async def test_update_gives_up_on_a_record_which_keeps_changing(
        self, user_records: UserRecordStorage, make_form
    ):
        await user_records.create_new_user(make_form())
        kv_storage = user_records.kv_storage

        async def always_stale(key, value, revision):
            return False

        kv_storage.compare_and_set = always_stale  # type: ignore
        user_records.max_update_attempts = 3
        with pytest.raises(ConflictError):
            await user_records.update("a@b.com", UserUpdate(phone="+111"))

    @pytest.mark.asyncio
    async def test_remove(self, user_records: UserRecordStorage, make_form):
        await user_records.create_new_user(make_form())
        await user_records.remove("a@b.com")
        assert await user_records.get("a@b.com") is None
        with pytest.raises(NotFoundError):
            await user_records.remove("a@b.com")

    @pytest.mark.asyncio
    async def test_remove_missing_user(self, user_records: UserRecordStorage):
        with pytest.raises(NotFoundError):
            await user_records.remove("nobody@b.com")

    @pytest.mark.asyncio
    async def test_email_can_register_again_after_removal(
        self, user_records: UserRecordStorage, make_form
    ):
        await user_records.create_new_user(make_form())
        await user_records.remove("a@b.com")
        await user_records.create_new_user(make_form(password="another1"))
        assert await user_records.check_user_password("a@b.com", "another1")

    @pytest.mark.asyncio
    async def test_list_all_never_has_password_hash(
        self, user_records: UserRecordStorage, make_form
    ):
        await user_records.create_new_user(make_form(email="a@b.com"))
        await user_records.create_new_user(make_form(email="c@d.com"))
        profiles = [p.to_json() async for p in user_records.list_all()]
        assert sorted(p["email"] for p in profiles) == ["a@b.com", "c@d.com"]
        for p in profiles:
            assert "passwordHash" not in p
            assert "password" not in p
            assert p["firstName"] == "A"

    @pytest.mark.asyncio
    async def test_get_profile(self, user_records: UserRecordStorage, make_form):
        await user_records.create_new_user(make_form())
        profile = await user_records.get_profile("a@b.com")
        assert profile and profile.email == "a@b.com"
        assert not hasattr(profile, "password_hash")
        assert await user_records.get_profile("nobody@b.com") is None

    @pytest.mark.asyncio
    async def test_cancelled_create_leaves_nothing_or_everything(
        self, user_records: UserRecordStorage, make_form
    ):
        task = asyncio.ensure_future(user_records.create_new_user(make_form()))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0.5)
        record = await user_records.get("a@b.com")
        if record is not None:
            assert record.password_hash.startswith("$argon2id$")
            assert record.phone == "+998900000000"


class TestEmptyUpdate:
    @pytest.mark.asyncio
    async def test_empty_update_does_not_write(
        self, user_records: UserRecordStorage, make_form
    ):
        before = await user_records.create_new_user(make_form())
        result = await user_records.update("a@b.com", UserUpdate())
        assert result == before
        entry = await user_records.kv_storage.get(user_records.key_of("a@b.com"))
        assert entry and entry.revision == 1

    @pytest.mark.asyncio
    async def test_empty_update_of_missing_user(self, user_records: UserRecordStorage):
        with pytest.raises(NotFoundError):
            await user_records.update("nobody@b.com", UserUpdate())
