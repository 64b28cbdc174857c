from .base import *

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

ALLOWED_HOSTS = ['testserver']

PAYTR = {
    "MERCHANT_ID": "123456",
    "MERCHANT_KEY": "test-merchant-key",
    "MERCHANT_SALT": "test-merchant-salt",
    "ACCESS_CHECK": True,
}
