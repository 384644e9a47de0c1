from services.token_store import TokenStore


def test_missing_file_means_no_token(tmp_path):
    assert TokenStore(str(tmp_path / "token")).load() is None


def test_save_then_load(tmp_path):
    store = TokenStore(str(tmp_path / "token"))
    store.save("abc123")

    assert TokenStore(str(tmp_path / "token")).load() == "abc123"


def test_clear_removes_token(tmp_path):
    store = TokenStore(str(tmp_path / "token"))
    store.save("abc123")
    store.clear()
    store.clear()

    assert store.load() is None


def test_blank_file_means_no_token(tmp_path):
    path = tmp_path / "token"
    path.write_text("  \n")

    assert TokenStore(str(path)).load() is None
