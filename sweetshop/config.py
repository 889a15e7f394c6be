# sweetshop/config.py
import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


class Config:
    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///sweetshop.db')
        self.SQLALCHEMY_TRACK_MODIFICATIONS = False
        self.SECRET_KEY = os.getenv('SECRET_KEY', 'devsecret')
        self.JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY') or self.SECRET_KEY
        self.JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
