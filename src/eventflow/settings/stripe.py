from decouple import config

DEFAULT_CURRENCY = config("DEFAULT_CURRENCY", default="usd")
STRIPE_SECRET_KEY = config("STRIPE_SECRET_KEY", default="sk_test_...")
STRIPE_PUBLISHABLE_KEY = config("STRIPE_PUBLISHABLE_KEY", default="pk_test_...")
STRIPE_WEBHOOK_SECRET = config("STRIPE_WEBHOOK_SECRET", default="whsec_...")
# Allowed clock skew when verifying webhook signatures, in seconds
STRIPE_WEBHOOK_TOLERANCE = config("STRIPE_WEBHOOK_TOLERANCE", cast=int, default=300)
