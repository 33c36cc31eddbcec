"""Channel visibility evaluated over guild, member and channel snapshots.

Snapshots are decoded from raw REST payloads so every check sees the current
role and overwrite state. Evaluation itself does no I/O.
"""

from __future__ import annotations

from typing import Any

import discord
import msgspec

from .errors import ThreadParentError

REQUIRED_PERMISSIONS = discord.Permissions(view_channel=True, read_message_history=True)

OVERWRITE_ROLE = 0
OVERWRITE_MEMBER = 1


class RoleSnapshot(msgspec.Struct, frozen=True):
    id: int
    permissions: int = 0


class GuildSnapshot(msgspec.Struct, frozen=True):
    id: int
    owner_id: int
    roles: list[RoleSnapshot] = msgspec.field(default_factory=list)


class UserRef(msgspec.Struct, frozen=True):
    id: int


class MemberSnapshot(msgspec.Struct, frozen=True):
    user: UserRef
    roles: list[int] = msgspec.field(default_factory=list)

    @property
    def id(self) -> int:
        return self.user.id


class OverwriteSnapshot(msgspec.Struct, frozen=True):
    id: int
    type: int
    allow: int = 0
    deny: int = 0


class ChannelSnapshot(msgspec.Struct, frozen=True):
    id: int
    type: int
    guild_id: int | None = None
    parent_id: int | None = None
    permission_overwrites: list[OverwriteSnapshot] = msgspec.field(
        default_factory=list
    )

    @property
    def kind(self) -> discord.ChannelType:
        return discord.ChannelType(self.type)


def decode_guild(payload: dict[str, Any]) -> GuildSnapshot:
    return msgspec.convert(payload, type=GuildSnapshot, strict=False)


def decode_member(payload: dict[str, Any]) -> MemberSnapshot:
    return msgspec.convert(payload, type=MemberSnapshot, strict=False)


def decode_channel(payload: dict[str, Any]) -> ChannelSnapshot:
    return msgspec.convert(payload, type=ChannelSnapshot, strict=False)


def compute_permissions(
    guild: GuildSnapshot,
    member: MemberSnapshot,
    channel: ChannelSnapshot,
) -> discord.Permissions:
    """Compute the member's effective permissions in ``channel``.

    Follows Discord's order: owner, base role permissions, administrator,
    then @everyone, role and member overwrites.
    """
    if member.id == guild.owner_id:
        return discord.Permissions.all()

    role_permissions = {role.id: role.permissions for role in guild.roles}
    # the @everyone role shares the guild's id
    base = role_permissions.get(guild.id, 0)
    for role_id in member.roles:
        base |= role_permissions.get(role_id, 0)

    permissions = discord.Permissions(base)
    if permissions.administrator:
        return discord.Permissions.all()

    overwrites = {overwrite.id: overwrite for overwrite in channel.permission_overwrites}

    everyone = overwrites.get(guild.id)
    if everyone is not None:
        permissions.handle_overwrite(allow=everyone.allow, deny=everyone.deny)

    allow = deny = 0
    for role_id in member.roles:
        overwrite = overwrites.get(role_id)
        if overwrite is not None and overwrite.type == OVERWRITE_ROLE:
            allow |= overwrite.allow
            deny |= overwrite.deny
    permissions.handle_overwrite(allow=allow, deny=deny)

    own = overwrites.get(member.id)
    if own is not None and own.type == OVERWRITE_MEMBER:
        permissions.handle_overwrite(allow=own.allow, deny=own.deny)

    return permissions


def visibility_target(channel: ChannelSnapshot) -> int | None:
    """Return the id of the channel whose overwrites decide visibility.

    Public threads defer to their parent and raise if they have none. Text
    and news channels answer for themselves. Any other kind returns None and
    is never visible.
    """
    try:
        kind = channel.kind
    except ValueError:
        return None
    if kind is discord.ChannelType.public_thread:
        if channel.parent_id is None:
            raise ThreadParentError(channel.id)
        return channel.parent_id
    if kind in (discord.ChannelType.text, discord.ChannelType.news):
        return channel.id
    return None


def can_view(
    guild: GuildSnapshot,
    member: MemberSnapshot,
    channel: ChannelSnapshot,
) -> bool:
    """Check view and history access on an already parent-resolved channel."""
    permissions = compute_permissions(guild, member, channel)
    return permissions.is_superset(REQUIRED_PERMISSIONS)
