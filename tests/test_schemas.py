"""Tests for articledb.models.schemas."""

from datetime import datetime, timezone

from articledb.models.schemas import NER, Article, ArticleRequest, Vector

PUBLISHED = datetime(2023, 5, 1, 12, 0, tzinfo=timezone.utc)


def _article(**overrides) -> Article:
    fields = {
        "title": "Title",
        "addr": "https://example.com/news/1",
        "author": "Jane Doe",
        "published": PUBLISHED,
        "body": "Body text.",
    }
    fields.update(overrides)
    return Article(**fields)


class TestArticleEqual:
    def test_identical_articles_are_equal(self) -> None:
        assert _article().equal(_article()) is True

    def test_differing_summary_is_equal(self) -> None:
        assert _article(summary="one").equal(_article(summary="two")) is True

    def test_derived_fields_are_ignored(self) -> None:
        a = _article(
            id="3f2b6c1e-8d4a-4b8e-9c1d-2a7e5f0b9c44",
            summary="Summary",
            keywords=["news"],
            ner=NER(pers=["Jane"], locs=["Berlin"], orgs=["ACME"]),
            created=datetime(2023, 5, 2, tzinfo=timezone.utc),
            updated=datetime(2023, 5, 3, tzinfo=timezone.utc),
        )
        assert a.equal(_article()) is True

    def test_differing_body_is_not_equal(self) -> None:
        assert _article(body="one").equal(_article(body="two")) is False

    def test_differing_title_is_not_equal(self) -> None:
        assert _article(title="one").equal(_article(title="two")) is False

    def test_differing_addr_is_not_equal(self) -> None:
        assert _article(addr="https://a.example").equal(_article(addr="https://b.example")) is False

    def test_differing_author_is_not_equal(self) -> None:
        assert _article(author="A").equal(_article(author="B")) is False

    def test_differing_published_is_not_equal(self) -> None:
        assert _article(published=None).equal(_article()) is False

    def test_eq_operator_uses_source_fields(self) -> None:
        assert _article(summary="one") == _article(summary="two")
        assert _article(body="one") != _article(body="two")

    def test_eq_with_other_type(self) -> None:
        assert _article() != "Body text."


class TestNER:
    def test_defaults_are_empty(self) -> None:
        ner = NER()
        assert ner.pers == [] and ner.locs == [] and ner.orgs == []

    def test_keeps_order_and_duplicates(self) -> None:
        ner = NER(pers=["B", "A", "B"])
        assert ner.pers == ["B", "A", "B"]


class TestVector:
    def test_dim_is_length_of_data(self) -> None:
        assert Vector(id="v", data=[0.1, 0.2, 0.3]).dim == 3

    def test_empty_vector_has_dim_zero(self) -> None:
        assert Vector().dim == 0


class TestArticleRequest:
    def test_to_article_keeps_source_fields(self) -> None:
        request = ArticleRequest(title="T", author="A", body="B", published=PUBLISHED)
        article = request.to_article()
        assert article.title == "T"
        assert article.body == "B"
        assert article.published == PUBLISHED
        assert article.summary == ""
        assert article.ner == NER()
