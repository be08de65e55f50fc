"""
Adapter for MeTube and other yt-dlp front ends that share its REST shape.
"""

from shareconnect.models.profile import Profile

from .base import ServiceAdapter


class MeTubeAdapter(ServiceAdapter):
    """`POST /add` with a JSON body; any 2xx counts as accepted."""

    service_name = "MeTube"
    ADD_PATH = "/add"

    async def deliver(self, profile: Profile, url: str) -> int:
        payload = {"url": url, "quality": "best"}
        response = await self.request(
            "POST", profile.endpoint(self.ADD_PATH), profile, json=payload
        )
        return self.check(response)


class YtDlAdapter(MeTubeAdapter):
    """YT-DLP web front ends accept the same payload as MeTube."""

    service_name = "YT-DLP"
