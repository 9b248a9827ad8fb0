import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def _env_int(name, default=0):
    raw = os.environ.get(name, '').strip()
    return int(raw) if raw.isdigit() else default


class Config:
    """Base configuration shared across all environments."""
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Carts live as long as the session cookie
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)

    # ── Cart ──────────────────────────────────────────────────────
    CART_MAX_ITEM       = _env_int('CART_MAX_ITEM')        # 0 = unlimited
    ITEM_MAX_QUANTITY   = _env_int('ITEM_MAX_QUANTITY')    # 0 = unlimited
    CART_PERSISTENCE    = os.environ.get('CART_PERSISTENCE', 'session')   # session | cookie
    CART_CODEC          = os.environ.get('CART_CODEC', 'json')            # json | delimited
    CART_ID_SEED        = os.environ.get('CART_ID_SEED')   # falls back to request host
    CART_COOKIE_MAX_AGE = timedelta(days=7)
    CART_COOKIE_PATH    = '/'

    # ── Logging ───────────────────────────────────────────────────
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    LOG_DIR   = os.environ.get('LOG_DIR', os.path.join(os.getcwd(), 'logs'))


class DevelopmentConfig(Config):
    """Development environment configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG').upper()


class ProductionConfig(Config):
    """Production environment configuration."""
    DEBUG = False

    # Ensure SECRET_KEY is set
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # Session Cookie Security
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class TestingConfig(Config):
    """Testing environment configuration."""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SESSION_COOKIE_SECURE = False
    CART_MAX_ITEM = 0
    ITEM_MAX_QUANTITY = 0
    CART_PERSISTENCE = 'session'
    CART_CODEC = 'json'
    CART_ID_SEED = None
    LOG_DIR = None   # stdout only


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
