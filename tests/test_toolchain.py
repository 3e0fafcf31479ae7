"""
Tests for Xcode toolchain discovery.
"""

import pytest

from hostfs.errors import PlatformError, ToolchainNotFoundError
from hostfs.toolchain import VersionData, XcodeSelectService, parse_xcode_version


@pytest.fixture
def xcode_runner(make_runner):
    return make_runner(
        outputs={
            "xcode-select": "/Applications/Xcode.app/Contents/Developer\n",
            "xcodebuild": "Xcode 15.2.1\nBuild version 15C500b\n",
        }
    )


def test_parse_xcode_version():
    """Test parsing xcodebuild output."""
    assert parse_xcode_version("Xcode 15.2.1\nBuild version 15C500b") == VersionData(
        "15", "2", "1"
    )
    assert parse_xcode_version("Xcode 14.3") == VersionData("14", "3", None)
    assert parse_xcode_version("") == VersionData(None, None, None)


def test_developer_directory(xcode_runner):
    """Test locating the developer and contents directories."""
    service = XcodeSelectService(xcode_runner, platform="darwin")

    assert (
        service.get_developer_directory_path().wait()
        == "/Applications/Xcode.app/Contents/Developer"
    )
    assert service.get_contents_directory_path().wait() == "/Applications/Xcode.app/Contents"


def test_developer_directory_requires_macos(xcode_runner):
    """Test that other platforms are refused."""
    service = XcodeSelectService(xcode_runner, platform="linux")

    with pytest.raises(PlatformError):
        service.get_developer_directory_path().wait()

    assert xcode_runner.calls == []


def test_developer_directory_missing(make_runner):
    """Test that empty xcode-select output is an error."""
    service = XcodeSelectService(make_runner(), platform="darwin")

    with pytest.raises(ToolchainNotFoundError):
        service.get_developer_directory_path().wait()


def test_version_is_cached_until_invalidated(xcode_runner):
    """Test that the version is computed once per cache lifetime."""
    service = XcodeSelectService(xcode_runner, platform="darwin")

    first = service.get_xcode_version().wait()
    second = service.get_xcode_version().wait()

    assert first == second == VersionData("15", "2", "1")
    assert [call["executable"] for call in xcode_runner.calls] == ["xcodebuild"]

    xcode_runner.outputs["xcodebuild"] = "Xcode 16.0\n"
    service.invalidate()

    assert service.get_xcode_version().wait() == VersionData("16", "0", None)
    assert len(xcode_runner.calls) == 2
