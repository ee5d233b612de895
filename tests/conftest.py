pytest_plugins = ["trotd.testing.conftest"]
