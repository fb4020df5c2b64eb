from datetime import datetime, timedelta

from content.text import (
    clean_text_for_tts, embed_url, estimate_tts_duration, extract_vimeo_id, extract_youtube_id,
    format_file_size, preview_text, reading_time_minutes, relative_time, strip_html, video_thumbnail_url,
)


def test_strip_html():
    assert strip_html("<p>봄&amp;여름</p>\n<br>  가을") == "봄&여름 가을"
    assert strip_html(None) == ""


def test_preview_text_cuts_at_word_boundary():
    text = "word " * 40
    preview = preview_text(text, 50)
    assert preview.endswith("...")
    assert len(preview) <= 53
    assert not preview[:-3].endswith(" ")


def test_clean_text_for_tts():
    assert clean_text_for_tts("<b>정말요???</b> *강조* #태그") == "정말요? 강조 태그"
    assert clean_text_for_tts("3km 걸었다") == "3 km 걸었다"


def test_reading_time_has_minimum_of_one_minute():
    assert reading_time_minutes("<p>짧은 글</p>") == 1
    assert reading_time_minutes("가" * 750) == 2


def test_estimate_tts_duration():
    assert estimate_tts_duration("가" * 21) == 3


def test_video_helpers():
    assert extract_youtube_id("https://youtu.be/dQw4w9WgXcQ") == "dQw4w9WgXcQ"
    assert extract_youtube_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=1") == "dQw4w9WgXcQ"
    assert extract_vimeo_id("https://vimeo.com/123456") == "123456"
    assert embed_url("youtube", "https://youtu.be/dQw4w9WgXcQ") == "https://www.youtube.com/embed/dQw4w9WgXcQ"
    assert embed_url("other", "https://example.com/video") is None
    assert video_thumbnail_url("vimeo", "https://vimeo.com/123456") == "https://vumbnail.com/123456.jpg"


def test_relative_time():
    now = datetime(2024, 5, 1, 12, 0, 0)
    assert relative_time(now - timedelta(seconds=10), now) == "방금 전"
    assert relative_time(now - timedelta(minutes=5), now) == "5분 전"
    assert relative_time(now - timedelta(hours=3), now) == "3시간 전"
    assert relative_time(now - timedelta(days=1), now) == "어제"
    assert relative_time(now - timedelta(days=3), now) == "3일 전"
    assert relative_time(now - timedelta(days=14), now) == "2주 전"
    assert relative_time(now - timedelta(days=90), now) == "3개월 전"
    assert relative_time(now - timedelta(days=800), now) == "2년 전"


def test_format_file_size():
    assert format_file_size(0) == "0 Bytes"
    assert format_file_size(1536) == "1.5 KB"
