from datetime import timedelta

import pytest

from modules.invites.exceptions import InvalidInviteError, InviteExpiredError
from modules.invites.models import InviteLink, InviteStatus
from modules.invites.repository import InMemoryInviteRepository
from modules.invites.service import InviteService


@pytest.fixture
def invites(clock):
    repo = InMemoryInviteRepository()
    repo.add(InviteLink(id="inv-1", code="PARTNER2025", role="partner", expires_at=clock() + timedelta(days=7)))
    repo.add(InviteLink(id="inv-2", code="OLD", role="partner", expires_at=clock() - timedelta(days=1)))
    repo.add(InviteLink(id="inv-3", code="FOREVER", role="support"))
    return repo


@pytest.fixture
def service(invites, users, clock):
    return InviteService(invites=invites, users=users, clock=clock)


class TestValidate:
    @pytest.mark.asyncio
    async def test_active_invite(self, service):
        result = await service.validate("PARTNER2025")
        assert result.valid
        assert result.invite_id == "inv-1"
        assert result.role == "partner"
        assert set(result.model_dump(by_alias=True)) == {"valid", "inviteId", "role", "expiresAt"}

    @pytest.mark.asyncio
    async def test_without_expiry(self, service):
        result = await service.validate(" FOREVER ")
        assert result.expires_at is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["", "   ", "UNKNOWN"])
    async def test_unknown_code(self, service, code):
        with pytest.raises(InvalidInviteError):
            await service.validate(code)

    @pytest.mark.asyncio
    async def test_expired_invite_is_marked(self, service, invites):
        with pytest.raises(InviteExpiredError):
            await service.validate("OLD")

        assert invites.get("inv-2").status == InviteStatus.EXPIRED
        with pytest.raises(InvalidInviteError):
            await service.validate("OLD")

    @pytest.mark.asyncio
    async def test_validate_does_not_consume(self, service):
        await service.validate("PARTNER2025")
        assert (await service.validate("PARTNER2025")).valid


class TestRedeem:
    @pytest.mark.asyncio
    async def test_redeem_assigns_role(self, service, invites, users, test_user_id, clock):
        role = await service.redeem("PARTNER2025", test_user_id)

        assert role == "partner"
        assert users.get_by_id(test_user_id).role == "partner"
        invite = invites.get("inv-1")
        assert invite.status == InviteStatus.USED
        assert invite.used_by == test_user_id
        assert invite.used_at == clock()

    @pytest.mark.asyncio
    async def test_single_use(self, service, test_user_id):
        await service.redeem("PARTNER2025", test_user_id)
        with pytest.raises(InvalidInviteError):
            await service.redeem("PARTNER2025", "someone-else")

    @pytest.mark.asyncio
    async def test_expired(self, service, test_user_id):
        with pytest.raises(InviteExpiredError):
            await service.redeem("OLD", test_user_id)

    @pytest.mark.asyncio
    async def test_concurrent_redeem_loses(self, service, invites, test_user_id, clock):
        # Another request used the invite between lookup and update
        assert invites.mark_used("inv-1", "first-user", clock())
        assert not invites.mark_used("inv-1", test_user_id, clock())
