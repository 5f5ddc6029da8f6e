from modules.preferences.models import ConsentMode, ConsentPreferences, ConsentUpdate


class TestConsentPreferences:
    def test_defaults_only_necessary(self):
        prefs = ConsentPreferences()
        assert prefs.necessary is True
        assert not (prefs.analytics or prefs.marketing or prefs.preferences)

    def test_necessary_cannot_be_declined(self):
        assert ConsentPreferences(necessary=False).necessary is True

    def test_accept_all(self):
        prefs = ConsentPreferences.accept_all()
        assert prefs.analytics and prefs.marketing and prefs.preferences

    def test_cookie_round_trip(self):
        prefs = ConsentPreferences(analytics=True)
        assert ConsentPreferences.from_cookie(prefs.to_cookie()) == prefs

    def test_cookie_value_is_url_encoded(self):
        assert "{" not in ConsentPreferences().to_cookie()

    def test_malformed_cookie_means_no_consent(self):
        assert ConsentPreferences.from_cookie("%7Bnot-json") is None
        assert ConsentPreferences.from_cookie("") is None
        assert ConsentPreferences.from_cookie(None) is None


class TestConsentUpdate:
    def test_accept_all_ignores_individual_flags(self):
        prefs = ConsentUpdate(mode=ConsentMode.ACCEPT_ALL, analytics=False).to_preferences()
        assert prefs == ConsentPreferences.accept_all()

    def test_necessary_only(self):
        prefs = ConsentUpdate(mode=ConsentMode.NECESSARY_ONLY, marketing=True).to_preferences()
        assert prefs == ConsentPreferences()

    def test_custom(self):
        prefs = ConsentUpdate(analytics=True, preferences=True).to_preferences()
        assert prefs.analytics and prefs.preferences
        assert not prefs.marketing
