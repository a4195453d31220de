"""Tests for platform and architecture resolution."""

from unittest.mock import AsyncMock, patch

import pytest

from foundryup.errors import UnsupportedTargetError
from foundryup.platforms import (
    Architecture,
    Platform,
    PlatformTarget,
    detect_target,
    is_translated,
    resolve_architecture,
    resolve_platform,
)


class TestResolvePlatform:
    def test_darwin(self):
        assert resolve_platform("Darwin") == Platform.DARWIN
        assert PlatformTarget(Platform.DARWIN, Architecture.ARM64).extension == "tar.gz"

    def test_mac_prefix(self):
        assert resolve_platform("macos") == Platform.DARWIN

    def test_windows_variants(self):
        assert resolve_platform("mingw64") == Platform.WIN32
        assert resolve_platform("MINGW64_NT-10.0") == Platform.WIN32
        assert resolve_platform("Windows") == Platform.WIN32
        assert PlatformTarget(Platform.WIN32, Architecture.AMD64).extension == "zip"

    def test_linux_and_alpine(self):
        assert resolve_platform("Linux") == Platform.LINUX
        assert resolve_platform("alpine") == Platform.ALPINE

    def test_unknown_is_fatal(self):
        with pytest.raises(UnsupportedTargetError, match="unsupported platform: foo"):
            resolve_platform("foo")


class TestResolveArchitecture:
    def test_x86_64_native(self):
        assert resolve_architecture("x86_64") == Architecture.AMD64

    def test_x86_64_translated(self):
        assert resolve_architecture("x86_64", translated=True) == Architecture.ARM64

    def test_arm(self):
        assert resolve_architecture("aarch64") == Architecture.ARM64
        assert resolve_architecture("arm64") == Architecture.ARM64

    def test_unknown_defaults_to_amd64(self):
        assert resolve_architecture("riscv64") == Architecture.AMD64


class TestWindowsSuffix:
    def test_binary_suffix(self):
        assert PlatformTarget(Platform.WIN32, Architecture.AMD64).binary_suffix == ".exe"
        assert PlatformTarget(Platform.LINUX, Architecture.AMD64).binary_suffix == ""


class TestDetectTarget:
    @pytest.mark.asyncio
    async def test_overrides_bypass_detection(self):
        with patch(
            "foundryup.platforms.is_translated", new_callable=AsyncMock
        ) as mock_probe:
            target = await detect_target("win32", "x86_64")

        assert target == PlatformTarget(Platform.WIN32, Architecture.AMD64)
        mock_probe.assert_not_called()

    @pytest.mark.asyncio
    async def test_rosetta_detected(self):
        with patch("foundryup.platforms._platform.system", return_value="Darwin"), patch(
            "foundryup.platforms._platform.machine", return_value="x86_64"
        ), patch(
            "foundryup.platforms.is_translated",
            new_callable=AsyncMock,
            return_value=True,
        ):
            target = await detect_target()

        assert target == PlatformTarget(Platform.DARWIN, Architecture.ARM64)

    @pytest.mark.asyncio
    async def test_is_translated_reads_sysctl(self):
        with patch(
            "foundryup.platforms.run_command_async",
            new_callable=AsyncMock,
            return_value=("1", 0),
        ):
            assert await is_translated() is True

        with patch(
            "foundryup.platforms.run_command_async",
            new_callable=AsyncMock,
            return_value=("sysctl: unknown oid", 1),
        ):
            assert await is_translated() is False
