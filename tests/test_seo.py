import xml.etree.ElementTree as ET

NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}


def test_sitemap_lists_pages(client, make_content):
    published = make_content()
    hidden = make_content(title="초안", is_published=False)

    response = client.get("/sitemap.xml")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert response.headers["cache-control"] == "public, max-age=3600"

    locs = [el.text for el in ET.fromstring(response.content).findall("sm:url/sm:loc", NS)]
    assert "http://testserver/" in locs
    assert "http://testserver/search" in locs
    assert "http://testserver/category/calligraphy" in locs
    assert f"http://testserver/content/{published.id}" in locs
    assert f"http://testserver/content/{hidden.id}" not in locs
    assert "http://testserver/author/%EA%B9%80%EC%9C%A0%EC%A0%95" in locs


def test_sitemap_database_error(client, make_content, failing_query):
    make_content()
    failing_query("all")

    response = client.get("/sitemap.xml")
    assert response.status_code == 500
    assert response.text == "Internal Server Error"


def test_robots_txt(client):
    response = client.get("/robots.txt")
    assert response.status_code == 200
    assert response.headers["cache-control"] == "public, max-age=86400"
    assert "Disallow: /admin/" in response.text
    assert "Disallow: /search?*" in response.text
    assert "Sitemap: http://testserver/sitemap.xml" in response.text
    assert "Crawl-delay: 1" in response.text
