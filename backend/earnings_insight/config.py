import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    def __init__(self):
        # Shared upstream credential (sent as X-Api-Key)
        self.API_KEY = os.getenv('API_KEY')

        # Upstream provider
        self.UPSTREAM_BASE_URL = os.getenv('UPSTREAM_BASE_URL', 'https://api.api-ninjas.com').rstrip('/')
        self.UPSTREAM_TIMEOUT = float(os.getenv('UPSTREAM_TIMEOUT', 10))

        # Sentence sentiment sampling
        self.SENTIMENT_PACING_DELAY = float(os.getenv('SENTIMENT_PACING_DELAY', 0.1))
        self.MAX_SENTIMENT_SENTENCES = int(os.getenv('MAX_SENTIMENT_SENTENCES', 20))

        # Cache durations (seconds)
        self.INDICATOR_CACHE_TTL = int(os.getenv('INDICATOR_CACHE_TTL', 60 * 60))
        self.EARNINGS_CACHE_TTL = int(os.getenv('EARNINGS_CACHE_TTL', 24 * 60 * 60))
        self.HISTORY_CACHE_TTL = int(os.getenv('HISTORY_CACHE_TTL', 5 * 60))
        self.HISTORY_CACHE_MAX_SIZE = int(os.getenv('HISTORY_CACHE_MAX_SIZE', 20))

        # Server Configuration
        self.PORT = int(os.getenv('PORT', 8000))
        self.HOST = os.getenv('HOST', '0.0.0.0')
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

        # Environment
        self.ENV = os.getenv('ENV', 'development')
        self.DEBUG = self.ENV == 'development'

# Create configuration instance
config = Config()
