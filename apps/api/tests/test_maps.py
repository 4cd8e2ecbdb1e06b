from manzil.services.maps import build_map_links


def test_map_links_need_coordinates():
    assert build_map_links(None) is None
    assert build_map_links({"city": "Kabul", "latitude": 34.5}) is None


def test_map_links_bbox_and_marker():
    links = build_map_links({"latitude": 34.5, "longitude": 69.2})

    assert links["embed_url"] == (
        "https://www.openstreetmap.org/export/embed.html"
        "?bbox=69.190000,34.490000,69.210000,34.510000&layer=mapnik&marker=34.500000,69.200000"
    )
    assert links["view_url"] == "https://www.openstreetmap.org/?mlat=34.500000&mlon=69.200000&zoom=15"
