from modules.auth.interfaces import IAuthService, IUserRepository
from modules.auth.identity import IIdentityProvider
from modules.auth.repository import InMemoryUserRepository
from modules.auth.service import AuthService


class TestAuthInterface:
    def test_service_implements_interface(self, users):
        """AuthService should satisfy the IAuthService protocol."""
        assert isinstance(AuthService(users=users), IAuthService)

    def test_interface_methods_exist(self):
        methods = ["validate_token", "get_user_by_id", "get_user_by_email", "update_profile"]
        for method in methods:
            assert hasattr(IAuthService, method)

    def test_in_memory_repository_implements_interface(self):
        assert isinstance(InMemoryUserRepository(), IUserRepository)

    def test_identity_provider_protocol_methods(self):
        for method in ["sign_up", "sign_in", "refresh_session", "sign_out", "query_profile"]:
            assert hasattr(IIdentityProvider, method)
