"""SQLAlchemy ORM models for collections, pages, property values and filters.

Every property-value table and every filter table has the same shape apart
from the type of its value column(s); the shared columns live in the mixins
below and each concrete table only declares its value columns.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, declared_attr

Base = declarative_base()

STR_COLUMN_LENGTH = 511


class PropertyTypeModel(Base):
    """Lookup table for property value type codes."""
    __tablename__ = "property_type"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)


class FilterTypeModel(Base):
    """Lookup table for filter kind codes."""
    __tablename__ = "filter_type"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)


class SortTypeModel(Base):
    """Lookup table for sort direction codes."""
    __tablename__ = "sort_type"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)


class CollectionModel(Base):
    """A named set of pages sharing one property schema.

    The sort directive lives on the collection row because a collection has
    at most one at any time.
    """
    __tablename__ = "collection"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    sort_by_prop_id = Column(
        Integer,
        ForeignKey(
            "property.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_collection_sort_by_prop_id",
        ),
        nullable=True,
    )
    sort_type_id = Column(Integer, ForeignKey("sort_type.id"), nullable=True)

    def __repr__(self):
        return f"<CollectionModel(id={self.id}, name={self.name})>"


class PropertyModel(Base):
    __tablename__ = "property"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    order = Column("order", SmallInteger, nullable=True)
    type_id = Column(Integer, ForeignKey("property_type.id"), nullable=False)
    collection_id = Column(
        Integer, ForeignKey("collection.id", ondelete="CASCADE"), nullable=False, index=True
    )

    def __repr__(self):
        return f"<PropertyModel(id={self.id}, name={self.name}, type_id={self.type_id})>"


class PageModel(Base):
    __tablename__ = "page"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    collection_id = Column(
        Integer, ForeignKey("collection.id", ondelete="CASCADE"), nullable=False, index=True
    )

    def __repr__(self):
        return f"<PageModel(id={self.id}, title={self.title})>"


class PageContentModel(Base):
    """Page body, kept apart so list views never load it."""
    __tablename__ = "page_content"

    page_id = Column(Integer, ForeignKey("page.id", ondelete="CASCADE"), primary_key=True)
    content = Column(Text, nullable=False)


class PropValMixin:
    """(page_id, prop_id) keyed value row."""

    @declared_attr
    def page_id(cls):
        return Column(Integer, ForeignKey("page.id", ondelete="CASCADE"), primary_key=True)

    @declared_attr
    def prop_id(cls):
        return Column(Integer, ForeignKey("property.id", ondelete="CASCADE"), primary_key=True)


class PropValBoolModel(PropValMixin, Base):
    __tablename__ = "propval_bool"
    value = Column(Boolean, nullable=False)


class PropValIntModel(PropValMixin, Base):
    __tablename__ = "propval_int"
    value = Column(BigInteger, nullable=False)


class PropValFloatModel(PropValMixin, Base):
    __tablename__ = "propval_float"
    value = Column(Float, nullable=False)


class PropValStrModel(PropValMixin, Base):
    __tablename__ = "propval_str"
    value = Column(String(STR_COLUMN_LENGTH), nullable=False)


class PropValDateModel(PropValMixin, Base):
    __tablename__ = "propval_date"
    value = Column(Date, nullable=False)


class PropValDatetimeModel(PropValMixin, Base):
    __tablename__ = "propval_datetime"
    value = Column(DateTime(timezone=True), nullable=False)


class PropValMultiStrModel(Base):
    """Parent row of a multi-string value; members live in the child table."""
    __tablename__ = "propval_multistr"
    __table_args__ = (UniqueConstraint("page_id", "prop_id", name="uq_propval_multistr_page_prop"),)

    id = Column(Integer, primary_key=True)
    page_id = Column(Integer, ForeignKey("page.id", ondelete="CASCADE"), nullable=False)
    prop_id = Column(Integer, ForeignKey("property.id", ondelete="CASCADE"), nullable=False)


class PropValMultiStrItemModel(Base):
    __tablename__ = "propval_multistr__value"

    id = Column(Integer, primary_key=True)
    propval_multistr_id = Column(
        Integer, ForeignKey("propval_multistr.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)
    value = Column(String(STR_COLUMN_LENGTH), nullable=False)


class FilterMixin:
    """Shared columns of every filter table.

    ``prop_id`` is unique: a property has at most one filter per table.
    """
    id = Column(Integer, primary_key=True)

    @declared_attr
    def type_id(cls):
        return Column(Integer, ForeignKey("filter_type.id"), nullable=False)

    @declared_attr
    def prop_id(cls):
        return Column(
            Integer,
            ForeignKey("property.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        )


class FilterBoolModel(FilterMixin, Base):
    __tablename__ = "filter_bool"
    value = Column(Boolean, nullable=False)


class FilterIntModel(FilterMixin, Base):
    __tablename__ = "filter_int"
    value = Column(BigInteger, nullable=False)


class FilterIntRangeModel(FilterMixin, Base):
    __tablename__ = "filter_int_range"
    start = Column(BigInteger, nullable=False)
    end = Column("end", BigInteger, nullable=False)


class FilterFloatModel(FilterMixin, Base):
    __tablename__ = "filter_float"
    value = Column(Float, nullable=False)


class FilterFloatRangeModel(FilterMixin, Base):
    __tablename__ = "filter_float_range"
    start = Column(Float, nullable=False)
    end = Column("end", Float, nullable=False)


class FilterStrModel(FilterMixin, Base):
    __tablename__ = "filter_str"
    value = Column(String(STR_COLUMN_LENGTH), nullable=False)


class FilterMultiStrModel(FilterMixin, Base):
    """``value`` is the member looked for by Equals / NotEquals."""
    __tablename__ = "filter_multistr"
    value = Column(String(STR_COLUMN_LENGTH), nullable=False)


class FilterDateModel(FilterMixin, Base):
    __tablename__ = "filter_date"
    value = Column(Date, nullable=False)


class FilterDateRangeModel(FilterMixin, Base):
    __tablename__ = "filter_date_range"
    start = Column(Date, nullable=False)
    end = Column("end", Date, nullable=False)


class FilterDatetimeModel(FilterMixin, Base):
    __tablename__ = "filter_datetime"
    value = Column(DateTime(timezone=True), nullable=False)


class FilterDatetimeRangeModel(FilterMixin, Base):
    __tablename__ = "filter_datetime_range"
    start = Column(DateTime(timezone=True), nullable=False)
    end = Column("end", DateTime(timezone=True), nullable=False)
