"""
OneSignal REST client wrapper for push delivery
"""

import httpx
from typing import Dict, Any, Optional, List

from config import Config
from exceptions.custom_errors import PushConfigurationError


# OneSignal priority scale
PUSH_PRIORITIES = {
    "high": 10,
    "normal": 5,
    "low": 1,
}


class OneSignalClient:
    """
    Wrapper for OneSignal notification API calls
    """

    def __init__(self, app_id: str, rest_api_key: str,
                 api_url: str = "https://onesignal.com/api/v1/notifications",
                 timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize OneSignal client

        Args:
            app_id: OneSignal application ID
            rest_api_key: OneSignal REST API key
            api_url: Notifications endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used for testing)
        """
        self.app_id = app_id
        self.rest_api_key = rest_api_key
        self.api_url = api_url
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_config(cls, config: Config) -> "OneSignalClient":
        """Build a client from configuration, requiring both credentials"""
        if not config.push_configured:
            raise PushConfigurationError("ONESIGNAL_APP_ID and ONESIGNAL_REST_API_KEY must be set")
        return cls(
            app_id=config.onesignal_app_id,
            rest_api_key=config.onesignal_rest_api_key,
            api_url=config.onesignal_api_url,
            timeout=config.push_timeout_seconds,
        )

    def build_payload(self, user_ids: List[str], title: str, message: str,
                      data: Optional[Dict[str, Any]] = None, priority: str = "normal") -> Dict[str, Any]:
        """
        Build the OneSignal notification body

        Args:
            user_ids: External user IDs to target
            title: Notification heading
            message: Notification content
            data: Extra data delivered with the notification
            priority: low, normal or high

        Returns:
            Request body for the notifications endpoint
        """
        return {
            "app_id": self.app_id,
            "include_external_user_ids": list(user_ids),
            "headings": {
                "en": title,
                "ar": title
            },
            "contents": {
                "en": message,
                "ar": message
            },
            "data": data or {"type": "system"},
            "android_accent_color": "FF667eea",
            "small_icon": "ic_notification",
            "ios_badge_type": "Increase",
            "ios_badge_count": 1,
            "priority": PUSH_PRIORITIES.get(priority, PUSH_PRIORITIES["normal"]),
        }

    async def send_to_users(self, user_ids: List[str], title: str, message: str,
                            data: Optional[Dict[str, Any]] = None, priority: str = "normal") -> bool:
        """
        Send a push notification to users

        Returns:
            True if OneSignal accepted the notification
        """
        if not self.rest_api_key:
            print("❌ OneSignal REST API key not configured")
            return False

        payload = self.build_payload(user_ids, title, message, data, priority)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Basic {self.rest_api_key}",
        }

        try:
            print("📤 Sending OneSignal notification via API...")
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
                result = response.json()

            if result.get("errors"):
                print(f"⚠️ OneSignal reported errors: {result['errors']}")
                return False

            print(f"✅ OneSignal notification sent: {result.get('id', 'unknown id')}")
            return True
        except httpx.HTTPStatusError as e:
            print(f"❌ OneSignal API error: {e.response.status_code} - {e.response.text}")
            return False
        except httpx.HTTPError as e:
            print(f"❌ Failed to reach OneSignal: {str(e)}")
            return False
