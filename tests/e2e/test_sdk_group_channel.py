"""SDK harness: group channel creation, membership and queries."""

import pytest

from sendbird_e2e.channels import GroupChannel, GroupChannelCreateParams
from sendbird_e2e.exceptions import PlatformAPIError
from sendbird_e2e.identifiers import current_millis, unique_name


@pytest.fixture
async def sdk_user(ctx):
    return await ctx.connect(prefix="sdk_group_user1")


@pytest.fixture
async def create_channel(ctx, sdk_user):
    """Factory creating tracked group channels as the connected user."""

    async def factory(**kwargs) -> GroupChannel:
        kwargs.setdefault("invited_user_ids", [sdk_user.user_id])
        channel = await ctx.chat.group_channel.create_channel(GroupChannelCreateParams(**kwargs))
        return ctx.track_sdk_group_channel(channel)

    return factory


class TestCreateGroupChannel:
    @pytest.mark.asyncio
    async def test_create_with_single_user(self, create_channel):
        """TC-SDK-012"""
        name = unique_name("Test Group Channel")

        channel = await create_channel(name=name, is_distinct=False)

        assert isinstance(channel, GroupChannel)
        assert channel.name == name
        assert channel.url
        assert channel.member_count >= 1

    @pytest.mark.asyncio
    async def test_create_with_multiple_users(self, ctx, create_channel, sdk_user):
        """TC-SDK-012-2"""
        second = await ctx.create_user("sdk_group_user2")

        channel = await create_channel(
            invited_user_ids=[sdk_user.user_id, second], name=unique_name("Multi User Channel")
        )

        assert channel.member_count == 2
        assert channel.has_member(sdk_user.user_id)
        assert channel.has_member(second)

    @pytest.mark.asyncio
    async def test_current_user_always_member(self, ctx, create_channel, sdk_user):
        other = await ctx.create_user("sdk_group_other")

        channel = await create_channel(invited_user_ids=[other], name="Implicit Owner")

        assert channel.has_member(sdk_user.user_id)

    @pytest.mark.asyncio
    async def test_distinct_channel_is_reused(self, create_channel):
        """TC-SDK-012-3"""
        first = await create_channel(name=unique_name("Distinct Channel"), is_distinct=True)
        second = await create_channel(is_distinct=True)

        assert second.url == first.url
        assert first.is_distinct

    @pytest.mark.asyncio
    async def test_create_with_korean_name(self, create_channel):
        """TC-SDK-012-4"""
        channel = await create_channel(name="테스트 그룹 채널")
        assert channel.name == "테스트 그룹 채널"

    @pytest.mark.asyncio
    async def test_create_with_custom_type(self, create_channel):
        """TC-SDK-012-5"""
        channel = await create_channel(
            name=unique_name("Custom Type Channel"), custom_type="support_chat"
        )
        assert channel.custom_type == "support_chat"


class TestInviteLeave:
    @pytest.mark.asyncio
    async def test_invite(self, ctx, create_channel):
        """TC-SDK-013"""
        channel = await create_channel(name=unique_name("Invite Leave Test Channel"))
        invitee = await ctx.create_user("invite_test_user")

        await channel.invite_with_user_ids([invitee])

        refreshed = await ctx.chat.group_channel.get_channel(channel.url)
        assert refreshed.member_count == 2
        assert refreshed.has_member(invitee)

    @pytest.mark.asyncio
    async def test_leave(self, ctx, create_channel, sdk_user):
        """TC-SDK-014"""
        channel = await create_channel(name=unique_name("Leave Test Channel"))

        await channel.leave()

        assert not channel.has_member(sdk_user.user_id)
        membership = await ctx.api.group_channels.is_member(channel.url, sdk_user.user_id)
        assert membership.data["is_member"] is False


class TestQueryGroupChannels:
    @pytest.mark.asyncio
    async def test_list_my_channels(self, ctx, create_channel):
        """TC-SDK-015"""
        created = await create_channel(name=unique_name("Listed Group"))

        query = ctx.chat.group_channel.create_my_group_channel_list_query(
            limit=10, include_empty=True
        )
        channels = await query.next()

        assert isinstance(channels, list)
        assert created.url in [channel.url for channel in channels]

    @pytest.mark.asyncio
    async def test_list_with_custom_type_filter(self, ctx, create_channel):
        """TC-SDK-015-2"""
        await create_channel(name=unique_name("Support"), custom_type="support_chat")
        await create_channel(name=unique_name("Other"), custom_type="other_type")

        query = ctx.chat.group_channel.create_my_group_channel_list_query(
            limit=10, include_empty=True, custom_types_filter=["support_chat"]
        )
        channels = await query.next()

        assert len(channels) == 1
        assert all(channel.custom_type == "support_chat" for channel in channels)

    @pytest.mark.asyncio
    async def test_empty_channels_hidden_by_default(self, ctx, create_channel):
        empty = await create_channel(name=unique_name("Empty"))

        query = ctx.chat.group_channel.create_my_group_channel_list_query(limit=10)
        channels = await query.next()

        assert empty.url not in [channel.url for channel in channels]

    @pytest.mark.asyncio
    async def test_get_by_url(self, ctx, create_channel):
        """TC-SDK-016"""
        created = await create_channel(name=unique_name("URL Query Test"))

        fetched = await ctx.chat.group_channel.get_channel(created.url)

        assert fetched.url == created.url
        assert fetched.name == created.name

    @pytest.mark.asyncio
    async def test_get_non_existent_channel(self, ctx, sdk_user):
        """TC-SDK-027-2"""
        with pytest.raises(PlatformAPIError):
            await ctx.chat.group_channel.get_channel(f"non_existent_group_{current_millis()}")


class TestTypingAndReceipts:
    @pytest.mark.asyncio
    async def test_typing_indicator(self, create_channel, sdk_user):
        channel = await create_channel(name=unique_name("Typing Channel"))

        await channel.start_typing()
        assert channel.is_typing
        assert [user.user_id for user in channel.get_typing_users()] == [sdk_user.user_id]

        await channel.end_typing()
        assert channel.get_typing_users() == []

    @pytest.mark.asyncio
    async def test_mark_as_read(self, create_channel):
        channel = await create_channel(name=unique_name("Read Channel"))
        await channel.mark_as_read()
