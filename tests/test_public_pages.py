import urllib.parse

from content.models import Comment


def test_home_shows_empty_state_per_category(client, make_content):
    make_content(title="첫 수필")
    response = client.get("/")
    assert response.status_code == 200
    assert "첫 수필" in response.text
    assert "아직 사진 작품이 없습니다." in response.text
    assert "아직 수필 작품이 없습니다." not in response.text


def test_empty_category_renders_empty_state(client):
    response = client.get("/category/photo")
    assert response.status_code == 200
    assert "아직 사진 작품이 없습니다" in response.text


def test_unknown_category_is_404(client):
    response = client.get("/category/novel")
    assert response.status_code == 404
    assert "카테고리를 찾을 수 없습니다." in response.text


def test_category_lists_only_published_items(client, make_content):
    make_content(title="공개된 글")
    make_content(title="숨겨진 글", is_published=False)
    make_content(title="다른 분류", category="poetry", original_text="春", translation="봄")

    response = client.get("/category/essay")
    assert "공개된 글" in response.text
    assert "숨겨진 글" not in response.text
    assert "다른 분류" not in response.text


def test_category_search(client, make_content):
    make_content(title="호수 이야기")
    make_content(title="산 이야기", author_name="이효석")

    response = client.get("/category/essay", params={"search": "이효석"})
    assert "산 이야기" in response.text
    assert "호수 이야기" not in response.text

    response = client.get("/category/essay", params={"search": "없는말"})
    assert "에 대한 검색 결과가 없습니다" in response.text


def test_category_pagination(client, make_content):
    for i in range(13):
        make_content(title=f"글 {i}")
    response = client.get("/category/essay", params={"page": 2})
    assert response.status_code == 200
    assert "2 / 2" in response.text


def test_unpublished_content_is_404(client, make_content):
    content = make_content(is_published=False)
    assert client.get(f"/content/{content.id}").status_code == 404
    assert client.get("/content/does-not-exist").status_code == 404


def test_view_is_counted_once_per_client(client, db, make_content):
    content = make_content()
    client.get(f"/content/{content.id}")
    client.get(f"/content/{content.id}")
    db.refresh(content)
    assert content.view_count == 1

    client.get(f"/content/{content.id}", headers={"X-Forwarded-For": "198.51.100.9"})
    db.refresh(content)
    assert content.view_count == 2


def test_detail_shows_poetry_and_related_works(client, make_content):
    poem = make_content(title="춘천", category="poetry", original_text="昭陽江水", translation="소양강 물")
    make_content(title="두 번째 시", category="poetry", original_text="原", translation="역")
    response = client.get(f"/content/{poem.id}")
    assert "昭陽江水" in response.text
    assert "소양강 물" in response.text
    assert "두 번째 시" in response.text


def test_like_once_per_client(client, make_content):
    content = make_content()
    first = client.post(f"/content/{content.id}/like").json()
    assert first == {"success": True, "message": "좋아요를 눌렀습니다!", "likes_count": 1}

    second = client.post(f"/content/{content.id}/like").json()
    assert second["success"] is False
    assert second["message"] == "이미 좋아요를 눌렀습니다."

    other = client.post(f"/content/{content.id}/like", headers={"X-Forwarded-For": "198.51.100.9"}).json()
    assert other["likes_count"] == 2


def test_like_unknown_content(client):
    response = client.post("/content/missing/like")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_add_comment(client, db, make_content):
    content = make_content()
    response = client.post(
        f"/content/{content.id}/comments",
        data={"author_name": "독자", "password": "1234", "content": "좋은 글 감사합니다."},
        follow_redirects=False,
    )
    assert response.status_code == 303

    comment = db.query(Comment).one()
    assert comment.user_name == "독자"
    assert comment.password_hash != "1234"
    assert "좋은 글 감사합니다." in client.get(f"/content/{content.id}").text


def test_invalid_comment_keeps_values(client, db, make_content):
    content = make_content()
    response = client.post(
        f"/content/{content.id}/comments",
        data={"author_name": "a", "password": "1234", "content": "남겨둘 내용"},
    )
    assert response.status_code == 400
    assert "사용자명은 2-20자 사이로 입력해주세요." in response.text
    assert "남겨둘 내용" in response.text
    assert db.query(Comment).count() == 0


def test_comment_requires_all_fields(client, make_content):
    content = make_content()
    response = client.post(f"/content/{content.id}/comments", data={"author_name": "독자"})
    assert response.status_code == 400
    assert "모두 입력해주세요" in response.text


def test_delete_own_comment(client, db, make_content):
    content = make_content()
    client.post(
        f"/content/{content.id}/comments",
        data={"author_name": "독자", "password": "1234", "content": "지울 댓글"},
    )
    comment = db.query(Comment).one()

    response = client.post(f"/content/{content.id}/comments/{comment.id}/delete", data={"password": "0000"})
    assert response.status_code == 403
    assert "비밀번호가 일치하지 않습니다." in response.text

    response = client.post(
        f"/content/{content.id}/comments/{comment.id}/delete",
        data={"password": "1234"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    db.refresh(comment)
    assert comment.is_deleted
    assert "지울 댓글" not in client.get(f"/content/{content.id}").text


def test_author_page_by_id_and_name(client, make_content):
    content = make_content(title="작가의 글")
    make_content(title="작가의 사진", category="photo", image_url="/media/a.jpg")

    by_id = client.get(f"/author/{content.author_id}")
    assert by_id.status_code == 200
    assert "작가의 글" in by_id.text
    assert "총 2개의 작품" in by_id.text

    by_name = client.get("/author/" + urllib.parse.quote("김유정"), params={"category": "photo"})
    assert "작가의 사진" in by_name.text
    assert "작가의 글" not in by_name.text


def test_unknown_author_is_404(client):
    assert client.get("/author/nobody").status_code == 404


def test_search_page(client, make_content):
    make_content(title="소양강 처녀")
    response = client.get("/search", params={"q": "소양강"})
    assert "소양강 처녀" in response.text
    assert "검색 결과 1건" in response.text

    response = client.get("/search")
    assert "검색어를 입력해주세요" in response.text


def test_instant_search(client, make_content):
    make_content(title="소양강 처녀", category="essay")
    make_content(title="소양강 비밀글", is_published=False)

    assert client.get("/api/search", params={"q": "소"}).json() == {"results": []}

    results = client.get("/api/search", params={"q": "소양강"}).json()["results"]
    assert len(results) == 1
    assert results[0]["title"] == "소양강 처녀"
    assert results[0]["categoryInfo"]["name"] == "수필"


def test_home_survives_database_errors(client, make_content, failing_query):
    make_content(title="첫 수필")
    failing_query("all")

    response = client.get("/")
    assert response.status_code == 200
    assert "첫 수필" not in response.text
    assert "아직 수필 작품이 없습니다." in response.text
    assert "아직 사진 작품이 없습니다." in response.text


def test_category_survives_database_errors(client, make_content, failing_query):
    make_content(title="첫 수필")
    failing_query("all")

    response = client.get("/category/essay")
    assert response.status_code == 200
    assert "첫 수필" not in response.text
    assert "아직 수필 작품이 없습니다" in response.text


def test_search_reports_database_errors(client, make_content, failing_query):
    make_content(title="소양강 처녀")
    failing_query("all")

    response = client.get("/search", params={"q": "소양강"})
    assert response.status_code == 200
    assert "검색 중 오류가 발생했습니다." in response.text
    assert "소양강 처녀" not in response.text


def test_instant_search_reports_database_errors(client, make_content, failing_query):
    make_content(title="소양강 처녀")
    failing_query("all")

    response = client.get("/api/search", params={"q": "소양강"})
    assert response.status_code == 500
    assert response.json() == {"results": [], "error": "검색 중 오류가 발생했습니다."}


def test_detail_renders_when_view_count_update_fails(client, db, make_content, failing_query):
    content = make_content(title="조회수 실패")
    failing_query("update")

    response = client.get(f"/content/{content.id}")
    assert response.status_code == 200
    assert "조회수 실패" in response.text

    db.refresh(content)
    assert content.view_count == 0


def test_author_name_with_percent_sequence(client, make_content):
    make_content(title="퍼센트 작가의 글", author_name="a%20b")

    response = client.get("/author/" + urllib.parse.quote("a%20b", safe=""))
    assert response.status_code == 200
    assert "퍼센트 작가의 글" in response.text

    assert client.get("/author/" + urllib.parse.quote("a b", safe="")).status_code == 404
