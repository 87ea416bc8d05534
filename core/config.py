from datetime import timedelta
import os
from dotenv import load_dotenv

load_dotenv()
class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///marketplace.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    RAZORPAY_KEY_ID = os.environ.get("RAZORPAY_KEY_ID")
    RAZORPAY_KEY_SECRET = os.environ.get("RAZORPAY_KEY_SECRET")
    RAZORPAY_API_URL = os.environ.get("RAZORPAY_API_URL", "https://api.razorpay.com/v1")
    RAZORPAY_TIMEOUT = float(os.environ.get("RAZORPAY_TIMEOUT", "10"))

    # Sandbox accounts reject large amounts; never enable in production
    RAZORPAY_TEST_MODE = os.environ.get("RAZORPAY_TEST_MODE", "false").lower() == "true"
    RAZORPAY_TEST_AMOUNT_CEILING = os.environ.get("RAZORPAY_TEST_AMOUNT_CEILING", "50000")
    PAYMENT_DEFAULT_CURRENCY = os.environ.get("PAYMENT_DEFAULT_CURRENCY", "INR")
