# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class BrandConfig:
    name: str
    display_name: str
    protocol: str
    logo_symbol: str
    logo_word: str
    website_url: str


@dataclass(frozen=True)
class PlatformDownload:
    url: str
    filename: str


@dataclass(frozen=True)
class DownloadConfig:
    enabled: bool
    windows: PlatformDownload
    mac: PlatformDownload
    linux: Optional[PlatformDownload] = None


BRAND_CONFIG = BrandConfig(
    name="pickleglass",
    display_name="Pickle Glass",
    protocol="pickleglass",
    logo_symbol="/pickleglass-symbol.svg",
    logo_word="/pickleglass-word.svg",
    website_url="https://pickle.com",
)

_RELEASES_URL = "https://github.com/pickle-com/glass/releases/latest/download"

DOWNLOAD_CONFIG = DownloadConfig(
    enabled=True,
    windows=PlatformDownload(
        url=f"{_RELEASES_URL}/Glass-Setup.exe", filename="Glass-Setup.exe"
    ),
    mac=PlatformDownload(url=f"{_RELEASES_URL}/Glass.dmg", filename="Glass.dmg"),
    linux=PlatformDownload(
        url=f"{_RELEASES_URL}/Glass.AppImage", filename="Glass.AppImage"
    ),
)

PLATFORM_DISPLAY_NAMES: Dict[str, str] = {
    "windows": "Windows",
    "mac": "macOS",
    "linux": "Linux",
}


def detect_user_platform(user_agent: str | None) -> str:
    """Returns windows, mac, linux or unknown for a browser user agent."""
    if not user_agent:
        return "unknown"
    lowered = user_agent.lower()
    if "win" in lowered:
        return "windows"
    if "mac" in lowered:
        return "mac"
    if "linux" in lowered:
        return "linux"
    return "unknown"


def _platform_download(
    platform: str, config: DownloadConfig = DOWNLOAD_CONFIG
) -> PlatformDownload:
    if platform == "mac":
        return config.mac
    if platform == "linux" and config.linux:
        return config.linux
    return config.windows


def get_download_url(platform: str, config: DownloadConfig = DOWNLOAD_CONFIG) -> str:
    return _platform_download(platform, config).url


def get_download_filename(
    platform: str, config: DownloadConfig = DOWNLOAD_CONFIG
) -> str:
    return _platform_download(platform, config).filename


def get_platform_display_name(platform: str) -> str:
    return PLATFORM_DISPLAY_NAMES.get(platform, "Desktop")
