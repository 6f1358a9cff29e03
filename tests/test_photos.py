from checkout_service.services.photos import extract_photo_urls, primary_photo_url


class TestExtractPhotoUrls:
    def test_empty_values(self):
        assert extract_photo_urls(None) == []
        assert extract_photo_urls("") == []
        assert extract_photo_urls("   ") == []
        assert extract_photo_urls([]) == []

    def test_list(self):
        assert extract_photo_urls(["a.jpg", "", "b.jpg"]) == ["a.jpg", "b.jpg"]

    def test_json_array_string(self):
        assert extract_photo_urls('["a.jpg", "b.jpg"]') == ["a.jpg", "b.jpg"]

    def test_comma_delimited_string(self):
        assert extract_photo_urls("a.jpg, b.jpg ,") == ["a.jpg", "b.jpg"]

    def test_single_url(self):
        assert extract_photo_urls(" https://img.test/a.jpg ") == ["https://img.test/a.jpg"]

    def test_unsupported_type(self):
        assert extract_photo_urls(42) == []


class TestPrimaryPhotoUrl:
    def test_first_photo_wins(self):
        assert primary_photo_url('["first.jpg", "second.jpg"]') == "first.jpg"

    def test_no_photo(self):
        assert primary_photo_url(None) is None
        assert primary_photo_url("[]") is None
