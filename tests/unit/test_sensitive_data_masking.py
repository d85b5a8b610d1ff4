import pytest

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_card_number_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "card": "4242 4242 4242 4242"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "4242 4242 4242 4242" not in result["card"]
        assert "***MASKED***" in result["card"]

    def test_uae_mobile_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "mobile": "+971 50 123 4567"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "123 4567" not in result["mobile"]
        assert "***MASKED***" in result["mobile"]

    def test_password_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_cvv_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "payload": "cvv: 123"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "123" not in result["payload"]

    def test_non_sensitive_data_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "order_created", "order_number": "ORD-20260101-ABC123"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["order_number"] == "ORD-20260101-ABC123"
        assert result["event"] == "order_created"

    def test_non_string_values_untouched(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "count": 4242424242424242}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["count"] == 4242424242424242
