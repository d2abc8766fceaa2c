"""
Fixed page routes and the JSON 404.
"""

import json

from static_pages import STATIC_DIR, route_not_found, serve_icon, serve_map_page


class TestStaticPages:
    def test_bundled_map_page(self):
        response = serve_map_page()

        assert response.status_code == 200
        assert response.mimetype == "text/html"
        assert b"/api/features/batch" in response.get_body()

    def test_bundled_icon(self):
        response = serve_icon()

        assert response.status_code == 200
        assert response.mimetype == "image/png"
        assert response.get_body() == (STATIC_DIR / "icon.png").read_bytes()

    def test_missing_file_is_404(self, tmp_path):
        response = serve_map_page(static_dir=tmp_path)

        assert response.status_code == 404
        assert json.loads(response.get_body()) == {"error": "Route not found"}

    def test_route_not_found(self):
        response = route_not_found()
        assert response.status_code == 404
        assert response.mimetype == "application/json"
