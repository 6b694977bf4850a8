from dynaconf import Dynaconf, LazySettings

type Settings = LazySettings

DEFAULT_SETTINGS = {
    "LOGGING": {
        "debug": False,
        "rich": False,
    },
    "APP": {
        "env": "development",
        "proxy": False,
        "subdomain_offset": 2,
        "proxy_ip_header": "X-Forwarded-For",
        "max_ips_count": 0,
        "silent": False,
    },
    "SERVER": {
        "host": "127.0.0.1",
        "port": 3000,
    },
}

_settings = None


def get_settings() -> Settings:
    global _settings
    if not _settings:
        _settings = Dynaconf(
            envvar_prefix="STRATA",
            settings_files=["settings.yaml", ".secrets.yaml"],
            merge_enabled=True,
        )
        _settings.configure(**DEFAULT_SETTINGS)
    return _settings
