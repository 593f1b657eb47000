from datetime import datetime, timezone

import pytest

from blog_cdc_search.post import PostNotFoundError
from blog_cdc_search.repository import SearchIndexRepository
from blog_cdc_search.search_service import SearchError, SearchParams, SearchService


class FakeSearchIndex(SearchIndexRepository):
    def __init__(self, results=None, error=None, documents=None):
        self.results = results or []
        self.error = error
        self.documents = documents or []
        self.calls = []

    def connect(self):
        pass

    def close(self):
        pass

    def create_collection(self, schema):
        pass

    def upsert_document(self, collection_name, document):
        pass

    def delete_document(self, collection_name, document_id):
        pass

    def search_documents(self, collection_name, query, search_params):
        self.calls.append((collection_name, query, search_params))
        if self.error:
            raise self.error
        return self.results

    def get_all_documents(self, collection_name):
        if self.error:
            raise self.error
        return self.documents


def hit(post_id, title="Test Post", score=0.9):
    return {
        "id": post_id,
        "title": title,
        "image": "test.jpg",
        "excerpt": "Test excerpt",
        "body": "Test body",
        "created_at": "2023-01-01 00:00:00",
        "updated_at": "2023-01-01 00:00:00",
        "_text_match": score,
    }


def test_service_holds_repository():
    repo = FakeSearchIndex()
    assert SearchService(repo).search_repo is repo


def test_empty_query():
    repo = FakeSearchIndex()
    result = SearchService(repo).search_posts(SearchParams(query="", page=1, per_page=10))
    assert result.total == 0
    assert result.results == []
    assert repo.calls == []


def test_whitespace_query():
    result = SearchService(FakeSearchIndex()).search_posts(
        SearchParams(query="   ", page=1, per_page=10)
    )
    assert result.total == 0
    assert result.total_pages == 0


def test_default_values():
    repo = FakeSearchIndex(results=[hit("1", score=0.95)])
    result = SearchService(repo).search_posts(SearchParams(query="test"))
    assert result.page == 1
    assert result.per_page == 10
    params = repo.calls[0][2]
    assert params == {
        "page": 1,
        "per_page": 10,
        "sort_by": "_text_match:desc,created_at:desc",
        "query_by": "title,excerpt,body",
    }


def test_filter_is_passed_through():
    repo = FakeSearchIndex()
    SearchService(repo).search_posts(SearchParams(query="x", filter_by="created_at:>0"))
    assert repo.calls[0][0] == "posts"
    assert repo.calls[0][2]["filter_by"] == "created_at:>0"


def test_max_per_page():
    result = SearchService(FakeSearchIndex()).search_posts(
        SearchParams(query="test", page=1, per_page=150)
    )
    assert result.per_page == 100


def test_successful_search():
    repo = FakeSearchIndex(results=[hit("1", "Test Post 1", 0.95), hit("2", "Test Post 2", 0.85)])
    result = SearchService(repo).search_posts(
        SearchParams(query="test query", page=1, per_page=10, sort_by="created_at:desc")
    )
    assert result.total == 2
    assert len(result.results) == 2
    assert result.query == "test query"
    assert result.page == 1
    assert result.per_page == 10
    first = result.results[0]
    assert first.post.title == "Test Post 1"
    assert first.score == 0.95
    assert first.post.id == 1


def test_pagination():
    repo = FakeSearchIndex(results=[hit(str(i + 1)) for i in range(12)])
    result = SearchService(repo).search_posts(SearchParams(query="test", page=2, per_page=5))
    assert result.total_pages == 3
    assert result.page == 2


def test_invalid_result_data_skipped():
    repo = FakeSearchIndex(
        results=["invalid result", {"title": "Valid Post"}, hit("invalid id", score=0.95)]
    )
    result = SearchService(repo).search_posts(SearchParams(query="test", page=1, per_page=10))
    assert result.results == []
    assert result.total == 0


def test_highlights_extracted():
    entry = hit("3")
    entry["highlights"] = {"title": ["<mark>Test</mark>", 5], "body": "not a list"}
    result = SearchService(FakeSearchIndex(results=[entry])).search_posts(
        SearchParams(query="test")
    )
    assert result.results[0].highlights == {"title": ["<mark>Test</mark>"]}


def test_repository_error():
    repo = FakeSearchIndex(error=PostNotFoundError())
    with pytest.raises(SearchError, match="search failed: post not found"):
        SearchService(repo).search_posts(SearchParams(query="test", page=1, per_page=10))


def test_extract_post():
    service = SearchService(FakeSearchIndex())
    post = service.extract_post(
        {
            "id": "1",
            "title": "Test Post",
            "image": "test.jpg",
            "excerpt": "Test excerpt",
            "body": "Test body",
            "created_at": "2023-01-01 00:00:00",
            "updated_at": "2023-01-01 00:00:00",
        }
    )
    assert post.id == 1
    assert post.title == "Test Post"
    assert post.image == "test.jpg"
    assert post.excerpt == "Test excerpt"
    assert post.body == "Test body"
    assert post.created_at is None


def test_extract_post_numeric_timestamps():
    post = SearchService(FakeSearchIndex()).extract_post(
        {"id": 4.0, "created_at": 1672531200, "updated_at": 1672531200.0}
    )
    assert post.id == 4
    assert post.created_at == datetime(2023, 1, 1, tzinfo=timezone.utc)
    assert post.updated_at == datetime(2023, 1, 1, tzinfo=timezone.utc)


def test_extract_post_missing_id():
    with pytest.raises(SearchError, match="missing post ID"):
        SearchService(FakeSearchIndex()).extract_post({"title": "Test Post", "body": "Test body"})


def test_extract_post_invalid_id():
    with pytest.raises(SearchError, match="invalid post ID format: invalid"):
        SearchService(FakeSearchIndex()).extract_post(
            {"id": "invalid", "title": "Test Post", "body": "Test body"}
        )


def test_extract_post_invalid_id_type():
    with pytest.raises(SearchError, match="invalid post ID type"):
        SearchService(FakeSearchIndex()).extract_post({"id": ["1"]})


def test_get_all_posts_from_index():
    repo = FakeSearchIndex(documents=[hit("1"), "junk", {"title": "no id"}, hit("2")])
    posts = SearchService(repo).get_all_posts_from_index()
    assert [post.id for post in posts] == [1, 2]


def test_get_all_posts_from_index_error():
    repo = FakeSearchIndex(error=RuntimeError("down"))
    with pytest.raises(SearchError, match="failed to retrieve posts from index: down"):
        SearchService(repo).get_all_posts_from_index()