from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class NER(BaseModel):
    """
    Named entities found in an article, one ordered list per entity type.
    Lists may be empty and are not deduplicated.
    """
    pers: List[str] = Field(default_factory=list, description="Persons found in the article")
    locs: List[str] = Field(default_factory=list, description="Locations found in the article")
    orgs: List[str] = Field(default_factory=list, description="Organisations found in the article")


class Article(BaseModel):
    """
    A news article.

    The fields title, addr, author, published and body form the original
    article. All other fields are derived from it or used for book keeping.
    """
    id: str = Field(default="", description="Identifier assigned by the store on commit")
    title: str = Field(default="", description="Article title")
    addr: str = Field(default="", description="Source address of the article")
    author: str = Field(default="", description="Article author")
    created: Optional[datetime] = Field(None, description="Creation timestamp")
    updated: Optional[datetime] = Field(None, description="Last update timestamp")
    published: Optional[datetime] = Field(None, description="Publication timestamp")
    body: str = Field(default="", description="Full article text")
    summary: str = Field(default="", description="Generated summary of the body")
    keywords: List[str] = Field(default_factory=list, description="Keywords extracted from the body")
    ner: NER = Field(default_factory=NER, description="Named entities found in the body")

    def equal(self, other: "Article") -> bool:
        """
        Compare only the original article fields: title, addr, author,
        published and body. Fields are not validated.
        """
        return (
            self.title == other.title
            and self.addr == other.addr
            and self.author == other.author
            and self.published == other.published
            and self.body == other.body
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Article):
            return NotImplemented
        return self.equal(other)


class Vector(BaseModel):
    """Text embedding produced by an encoder."""
    id: str = Field(default="", description="Identifier of the vector")
    data: List[float] = Field(default_factory=list, description="Embedding components")

    @property
    def dim(self) -> int:
        return len(self.data)


class ArticleRequest(BaseModel):
    """Add article request. Derived fields are computed by the service."""
    id: str = ""
    title: str = ""
    addr: str = ""
    author: str = ""
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
    published: Optional[datetime] = None
    body: str = Field(..., description="Full article text")

    def to_article(self) -> Article:
        return Article(**self.model_dump())


class AddArticleResponse(BaseModel):
    """Add article response."""
    id: str


class ErrorResponse(BaseModel):
    """Error payload returned by the API."""
    error: str
    detail: Optional[str] = None
    branch: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    store_backend: str
    extractor_mode: str
    services: dict = Field(default_factory=dict)
    version: str
