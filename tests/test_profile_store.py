import uuid

import pytest

from shareconnect.exceptions import ConfigurationError, ProfileNotFoundError
from shareconnect.models.profile import Profile, ServiceKind, TorrentClient
from shareconnect.storage.profile_store import ProfileStore


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "profiles.ini"


def _profile(name, **kwargs):
    data = {"name": name, "base_url": "http://nas.local", "port": 8081}
    data.update(kwargs)
    return Profile(**data)


class TestProfileStore:

    def test_empty_store(self, store_path):
        store = ProfileStore(store_path)
        assert store.list_profiles() == []
        assert store.default_profile() is None

    def test_round_trip_through_file(self, store_path):
        store = ProfileStore(store_path)
        added = store.add(
            _profile(
                "qBit",
                service_kind=ServiceKind.TORRENT,
                torrent_client=TorrentClient.QBITTORRENT,
                username="admin",
                password="p%ss",
            )
        )

        reloaded = ProfileStore(store_path).get(added.id)

        assert reloaded == added
        assert reloaded.password == "p%ss"
        assert f"[profile:{added.id}]" in store_path.read_text(encoding="utf-8")

    def test_credential_whitespace_survives_reload(self, store_path):
        store = ProfileStore(store_path)
        added = store.add(_profile("Box", username=" admin ", password=" pa ss "))

        reloaded = ProfileStore(store_path).get(added.id)

        assert reloaded.username == " admin "
        assert reloaded.password == " pa ss "

    def test_unquoted_credentials_in_file_are_read_as_is(self, store_path):
        pid = uuid.uuid4()
        store_path.write_text(
            f"[profile:{pid}]\nname = Box\nbase_url = http://h\nport = 80\n"
            "username = admin\npassword = s3cret\n",
            encoding="utf-8",
        )

        profile = ProfileStore(store_path).get(pid)

        assert (profile.username, profile.password) == ("admin", "s3cret")

    def test_first_profile_becomes_default(self, store_path):
        store = ProfileStore(store_path)
        first = store.add(_profile("One"))
        store.add(_profile("Two"))

        assert first.is_default
        assert store.default_profile().name == "One"

    def test_set_default_clears_other_flags(self, store_path):
        store = ProfileStore(store_path)
        store.add(_profile("One"))
        two = store.add(_profile("Two"))
        store.add(_profile("Three"))

        store.set_default(two.id)

        reloaded = ProfileStore(store_path)
        defaults = [p.name for p in reloaded.list_profiles() if p.is_default]
        assert defaults == ["Two"]
        assert reloaded.default_profile().name == "Two"

    def test_adding_a_default_profile_clears_the_old_default(self, store_path):
        store = ProfileStore(store_path)
        store.add(_profile("One"))
        store.add(_profile("Two", is_default=True))

        assert [p.name for p in store.list_profiles() if p.is_default] == ["Two"]

    def test_default_falls_back_to_first_profile(self, store_path):
        store = ProfileStore(store_path)
        one = store.add(_profile("One"))
        store.add(_profile("Two"))
        store.update(one.model_copy(update={"is_default": False}))

        assert store.default_profile().name == "One"
        assert not any(p.is_default for p in store.list_profiles())

    def test_duplicate_defaults_in_file_keep_the_first(self, store_path, caplog):
        ids = [uuid.uuid4(), uuid.uuid4()]
        store_path.write_text(
            "".join(
                f"[profile:{pid}]\nname = P{i}\nbase_url = http://h\nport = 80\n"
                "service_kind = metube\nis_default = true\n\n"
                for i, pid in enumerate(ids)
            ),
            encoding="utf-8",
        )

        store = ProfileStore(store_path)

        assert [p.is_default for p in store.list_profiles()] == [True, False]
        assert "keeping the first default only" in caplog.text

    def test_find_by_name_and_id(self, store_path):
        store = ProfileStore(store_path)
        added = store.add(_profile("Living Room"))

        assert store.find("Living Room").id == added.id
        assert store.find("living room").id == added.id
        assert store.find(str(added.id)).id == added.id
        with pytest.raises(ProfileNotFoundError):
            store.find("Kitchen")

    def test_delete(self, store_path):
        store = ProfileStore(store_path)
        added = store.add(_profile("One"))

        store.delete(added.id)

        assert ProfileStore(store_path).list_profiles() == []
        with pytest.raises(ProfileNotFoundError):
            store.delete(added.id)

    def test_get_unknown_id(self, store_path):
        with pytest.raises(ProfileNotFoundError):
            ProfileStore(store_path).get("not-a-uuid")

    def test_invalid_section_is_a_configuration_error(self, store_path):
        store_path.write_text(
            f"[profile:{uuid.uuid4()}]\nname = Bad\nbase_url = nas.local\nport = 80\n",
            encoding="utf-8",
        )
        with pytest.raises(ConfigurationError):
            ProfileStore(store_path)

    def test_duplicate_id_rejected(self, store_path):
        store = ProfileStore(store_path)
        added = store.add(_profile("One"))
        with pytest.raises(ConfigurationError):
            store.add(added)
