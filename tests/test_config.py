import pytest

from zkchain.config import BackendConfig, circuits_root


class TestBackendConfig:
    def test_defaults(self, monkeypatch):
        for name in ("ZKCHAIN_THREADS", "ZKCHAIN_SRS_SEED", "ZKCHAIN_SRS_DEGREE"):
            monkeypatch.delenv(name, raising=False)
        assert BackendConfig.from_env() == BackendConfig(threads=8, srs_seed=12345, srs_degree=64)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ZKCHAIN_THREADS", "2")
        monkeypatch.setenv("ZKCHAIN_SRS_SEED", "7")
        monkeypatch.setenv("ZKCHAIN_SRS_DEGREE", " ")
        config = BackendConfig.from_env()
        assert (config.threads, config.srs_seed, config.srs_degree) == (2, 7, 64)

    def test_env_not_integer(self, monkeypatch):
        monkeypatch.setenv("ZKCHAIN_THREADS", "many")
        with pytest.raises(ValueError):
            BackendConfig.from_env()

    @pytest.mark.parametrize("kwargs", [{"threads": 0}, {"srs_degree": 0}])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            BackendConfig(**kwargs)

    def test_frozen(self):
        with pytest.raises(AttributeError):
            BackendConfig().threads = 1


class TestCircuitsRoot:
    def test_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ZKCHAIN_CIRCUITS_DIR", str(tmp_path))
        assert circuits_root() == str(tmp_path)

    def test_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv("ZKCHAIN_CIRCUITS_DIR", raising=False)
        monkeypatch.chdir(tmp_path)
        assert circuits_root() == str(tmp_path / "circuits")
