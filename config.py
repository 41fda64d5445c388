"""
Configuration management for the trainer matching engine
"""

import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Configuration management for trainer matching and workflow notifications"""

    # Last reported (missing required, missing push) pair, shared by all instances
    _last_report = None

    def __init__(self):
        # Database Configuration
        self.database_url = self._get_env_var("DATABASE_URL")  # PostgreSQL connection string
        self.supabase_database_url = self._get_env_var("SUPABASE_DATABASE_URL")  # Alternative: Supabase URL

        # Use Supabase URL if available, otherwise use DATABASE_URL
        self.db_connection_string = self.supabase_database_url or self.database_url
        self.db_max_concurrency = int(self._get_env_var("DB_MAX_CONCURRENCY", "4"))

        # OneSignal Push Configuration
        self.onesignal_app_id = self._get_env_var("ONESIGNAL_APP_ID")
        self.onesignal_rest_api_key = self._get_env_var("ONESIGNAL_REST_API_KEY")
        self.onesignal_api_url = self._get_env_var(
            "ONESIGNAL_API_URL",
            "https://onesignal.com/api/v1/notifications"
        )
        self.push_timeout_seconds = float(self._get_env_var("PUSH_TIMEOUT_SECONDS", "30"))

        # Notification Configuration
        self.notification_ttl_days = int(self._get_env_var("NOTIFICATION_TTL_DAYS", "30"))

        # Matching Configuration
        self.default_max_trainers = int(self._get_env_var("DEFAULT_MAX_TRAINERS", "5"))
        self.workload_window_days = int(self._get_env_var("WORKLOAD_WINDOW_DAYS", "7"))

        # Match quality thresholds
        self.match_threshold_excellent = float(self._get_env_var("MATCH_THRESHOLD_EXCELLENT", "0.80"))
        self.match_threshold_good = float(self._get_env_var("MATCH_THRESHOLD_GOOD", "0.60"))
        self.match_threshold_fair = float(self._get_env_var("MATCH_THRESHOLD_FAIR", "0.40"))

        # Validate required configuration
        self._validate_config()

    def _get_env_var(self, var_name: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable with optional default"""
        value = os.getenv(var_name, default)
        return value.strip() if value else None

    def _validate_config(self):
        """Validate that required configuration is present"""
        required_vars = {
            "DATABASE_URL or SUPABASE_DATABASE_URL": self.db_connection_string,
        }
        optional_vars = {
            "ONESIGNAL_APP_ID": self.onesignal_app_id,
            "ONESIGNAL_REST_API_KEY": self.onesignal_rest_api_key,
        }

        missing_vars = [var for var, value in required_vars.items() if not value]
        missing_push = [var for var, value in optional_vars.items() if not value]

        report = (tuple(missing_vars), tuple(missing_push))
        if report == Config._last_report:
            return
        Config._last_report = report

        if missing_vars:
            print("⚠️ Missing required environment variables:")
            for var in missing_vars:
                print(f"   - {var}")
            print("\nPlease set these environment variables before running the application.")
        else:
            print("✅ All required environment variables are set")

        if missing_push:
            print(f"⚠️ Push delivery disabled, missing: {', '.join(missing_push)}")

    @property
    def is_configured(self) -> bool:
        """Check if all required configuration is present"""
        return bool(self.db_connection_string)

    @property
    def push_configured(self) -> bool:
        """Check if OneSignal credentials are present"""
        return all([
            self.onesignal_app_id,
            self.onesignal_rest_api_key,
        ])

    def get_config_status(self) -> dict:
        """Get configuration status for debugging"""
        return {
            "database_configured": bool(self.db_connection_string),
            "push_configured": self.push_configured,
            "default_max_trainers": self.default_max_trainers,
            "workload_window_days": self.workload_window_days,
            "fully_configured": self.is_configured
        }
