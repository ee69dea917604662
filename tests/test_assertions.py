"""Tests for the negative-path assertion helpers."""

import pytest

from sendbird_e2e._constants import USER_NOT_FOUND_CODES
from sendbird_e2e.assertions import assert_api_error, assert_has_fields, expect_api_error
from sendbird_e2e.exceptions import PlatformAPIError


async def _raise(error):
    raise error


async def _succeed():
    return {"ok": True}


class TestExpectApiError:
    """Tests for expect_api_error."""

    @pytest.mark.asyncio
    async def test_returns_matching_error(self):
        error = PlatformAPIError(status_code=400, code=400301)
        caught = await expect_api_error(_raise(error), USER_NOT_FOUND_CODES)
        assert caught is error

    @pytest.mark.asyncio
    async def test_success_fails_the_test(self):
        with pytest.raises(AssertionError, match="Expected the Platform API to reject"):
            await expect_api_error(_succeed())

    @pytest.mark.asyncio
    async def test_code_outside_allow_list(self):
        error = PlatformAPIError(status_code=400, code=400105)
        with pytest.raises(AssertionError, match="Expected vendor code"):
            await expect_api_error(_raise(error), USER_NOT_FOUND_CODES)

    @pytest.mark.asyncio
    async def test_status_mismatch(self):
        error = PlatformAPIError(status_code=401, code=400401)
        with pytest.raises(AssertionError, match="Expected HTTP 400"):
            await expect_api_error(_raise(error))

    @pytest.mark.asyncio
    async def test_any_status_and_code(self):
        error = PlatformAPIError(status_code=503)
        assert await expect_api_error(_raise(error), codes=None, status=None) is error

    @pytest.mark.asyncio
    async def test_other_exceptions_propagate(self):
        with pytest.raises(KeyError):
            await expect_api_error(_raise(KeyError("x")))


class TestAssertApiError:
    def test_accepts_matching(self):
        error = PlatformAPIError(status_code=400, code=400202)
        assert assert_api_error(error, [400202]) is error


class TestAssertHasFields:
    def test_all_present(self):
        assert_has_fields({"user_id": "a", "nickname": ""}, ["user_id", "nickname"])

    def test_reports_missing(self):
        with pytest.raises(AssertionError, match="metadata"):
            assert_has_fields({"user_id": "a"}, ["user_id", "metadata"])
