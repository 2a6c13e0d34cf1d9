from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Column, Integer, SmallInteger, String, Text, Numeric, TIMESTAMP, ForeignKey, Index
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

# The five rating criteria, in display order
RATING_CRITERIA = ("enjoyment", "writing", "themes", "characters", "worldbuilding")


class TaxonomyKind(str, Enum):
    """Taxonomy tag kinds.

    Declaration order is the rank-assignment contract: a book's tag list is
    ranked genres first, then subgenres, themes and finally tropes.
    """

    GENRE = "genre"
    SUBGENRE = "subgenre"
    THEME = "theme"
    TROPE = "trope"

    @property
    def order(self) -> int:
        return list(TaxonomyKind).index(self)


class SentimentBand(str, Enum):
    OVERWHELMINGLY_COMPATIBLE = "Overwhelmingly Compatible"
    VERY_COMPATIBLE = "Very Compatible"
    MOSTLY_COMPATIBLE = "Mostly Compatible"
    MIXED = "Mixed"
    MOSTLY_INCOMPATIBLE = "Mostly Incompatible"
    NOT_COMPATIBLE = "Not Compatible"
    OVERWHELMINGLY_NOT_COMPATIBLE = "Overwhelmingly Not Compatible"


# ====================================================================
# STORAGE ROW SHAPES
# ====================================================================
# Rows as the storage layer hands them over. Decimal columns come back as
# ``Decimal`` (or strings from raw drivers) and go through
# ``scoring_engine.records`` before reaching the scoring functions.

class GenreTaxonomy(Base):
    """Admin-curated genre/subgenre/theme/trope catalog"""
    __tablename__ = "genre_taxonomies"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    type = Column(String, nullable=False)  # genre|subgenre|theme|trope
    parent_id = Column(Integer, ForeignKey('genre_taxonomies.id'))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    deleted_at = Column(TIMESTAMP(timezone=True))  # soft delete only


class BookGenreTaxonomy(Base):
    """Ranked taxonomy assignment of a book"""
    __tablename__ = "book_genre_taxonomies"

    id = Column(Integer, primary_key=True)
    book_id = Column(Integer, nullable=False)
    taxonomy_id = Column(Integer, ForeignKey('genre_taxonomies.id'), nullable=False)
    rank = Column(Integer, nullable=False)  # 1-based, global across kinds
    importance = Column(Numeric(10, 6))  # derived from rank


class ViewGenre(Base):
    """Ranked taxonomy entry of a user's genre view"""
    __tablename__ = "view_genres"

    id = Column(Integer, primary_key=True)
    view_id = Column(Integer, nullable=False)
    taxonomy_id = Column(Integer, ForeignKey('genre_taxonomies.id'), nullable=False)
    type = Column(String, nullable=False)
    rank = Column(Integer, nullable=False)


class Rating(Base):
    """Per-criterion thumbs rating of a book (-1, 0 or 1 each)"""
    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False)
    book_id = Column(Integer, nullable=False)
    enjoyment = Column(SmallInteger, nullable=False, default=0)
    writing = Column(SmallInteger, nullable=False, default=0)
    themes = Column(SmallInteger, nullable=False, default=0)
    characters = Column(SmallInteger, nullable=False, default=0)
    worldbuilding = Column(SmallInteger, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class RatingPreferences(Base):
    """A reader's personal weighting of the rating criteria"""
    __tablename__ = "rating_preferences"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, unique=True)
    enjoyment = Column(Numeric(4, 3), nullable=False)
    writing = Column(Numeric(4, 3), nullable=False)
    themes = Column(Numeric(4, 3), nullable=False)
    characters = Column(Numeric(4, 3), nullable=False)
    worldbuilding = Column(Numeric(4, 3), nullable=False)


Index('idx_book_genre_taxonomies_book_id', BookGenreTaxonomy.book_id)
Index('idx_book_genre_taxonomies_taxonomy_id', BookGenreTaxonomy.taxonomy_id)
Index('idx_view_genres_view_id', ViewGenre.view_id)
Index('idx_ratings_book_id', Rating.book_id)

# --------------------------------------------------------------------
# ENGINE MODELS (Pydantic)
# --------------------------------------------------------------------


class _RecordModel(BaseModel):
    """Shared config for record models."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)


class TaxonomyTag(_RecordModel):
    id: int
    name: str
    kind: TaxonomyKind
    parent_id: Optional[int] = None


class TaxonomyRef(_RecordModel):
    """One entry of an editor-submitted tag list.

    Lists of these are expected in ``TaxonomyKind`` order (genres, subgenres,
    themes, tropes); list position becomes the global rank.
    """

    taxonomy_id: int
    kind: TaxonomyKind


class BookTaxonomyAssignment(_RecordModel):
    book_id: Optional[int] = None
    taxonomy_id: int
    kind: Optional[TaxonomyKind] = None
    rank: int = Field(ge=1)
    importance: Optional[float] = None


class ViewTag(_RecordModel):
    view_id: Optional[int] = None
    taxonomy_id: int
    kind: Optional[TaxonomyKind] = None
    rank: int = Field(ge=1)


class RatingVector(_RecordModel):
    """Signed per-criterion rating: -1 thumbs down, 0 unrated, 1 thumbs up.

    Fractional values appear when the vector holds per-criterion averages.
    """

    user_id: Optional[int] = None
    book_id: Optional[int] = None
    enjoyment: float = Field(0, ge=-1, le=1)
    writing: float = Field(0, ge=-1, le=1)
    themes: float = Field(0, ge=-1, le=1)
    characters: float = Field(0, ge=-1, le=1)
    worldbuilding: float = Field(0, ge=-1, le=1)


class PreferenceWeights(_RecordModel):
    """Criterion weights in [0, 1]; they need not sum to 1.

    Values are not range-checked here: at scoring time non-finite weights are
    replaced by the system defaults and the rest are clamped into [0, 1].
    """

    user_id: Optional[int] = None
    enjoyment: float
    writing: float
    themes: float
    characters: float
    worldbuilding: float

    def as_dict(self) -> Dict[str, float]:
        return {c: getattr(self, c) for c in RATING_CRITERIA}


class BookScore(_RecordModel):
    # passed through unchanged: int, str, UUID or whatever key the caller groups by
    book_id: Any
    total_score: float
    matching_count: int


class CriterionCompatibility(_RecordModel):
    band: SentimentBand
    difference: float
    normalized: float


class CompatibilityResult(_RecordModel):
    overall: SentimentBand
    score: int = Field(ge=-3, le=3)
    normalized_difference: float
    per_criterion: Dict[str, CriterionCompatibility]


class RatingSummary(_RecordModel):
    count: int
    weighted_average: float
    straight_average: float
    criteria: RatingVector
    overall: float
    compatibility: float
