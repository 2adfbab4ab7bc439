from snippetbox.config.settings import (
    CONFIGS,
    Config,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    default_addr,
    normalize_dsn,
)

__all__ = [
    'CONFIGS',
    'Config',
    'DevelopmentConfig',
    'ProductionConfig',
    'TestingConfig',
    'default_addr',
    'normalize_dsn',
]
