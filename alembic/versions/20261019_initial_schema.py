"""Initial schema for collections, pages, property values and filters

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

NOTE: The code tables (property_type, filter_type, sort_type) are filled from
``code_table()``, the mapping the service itself uses; changing a code requires
a migration.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from collection_service.core.values import FilterKind, SortDirection, ValueType, code_table

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STR_LENGTH = 511

PROPERTY_TYPES = list(code_table(ValueType))
FILTER_TYPES = list(code_table(FilterKind))
SORT_TYPES = list(code_table(SortDirection))


# (table suffix, column type)
PROPVAL_TYPES = [
    ("bool", sa.Boolean()),
    ("int", sa.BigInteger()),
    ("float", sa.Float()),
    ("str", sa.String(length=STR_LENGTH)),
    ("date", sa.Date()),
    ("datetime", sa.DateTime(timezone=True)),
]
FILTER_VALUE_TYPES = PROPVAL_TYPES[:4] + [("multistr", sa.String(length=STR_LENGTH))] + PROPVAL_TYPES[4:]
FILTER_RANGE_TYPES = [
    ("int", sa.BigInteger()),
    ("float", sa.Float()),
    ("date", sa.Date()),
    ("datetime", sa.DateTime(timezone=True)),
]


def _code_table(name: str, rows) -> None:
    table = op.create_table(
        name,
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.bulk_insert(table, [{"id": code, "name": label} for code, label in rows])


def _filter_columns():
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('type_id', sa.Integer(), sa.ForeignKey('filter_type.id'), nullable=False),
        sa.Column(
            'prop_id', sa.Integer(),
            sa.ForeignKey('property.id', ondelete='CASCADE'),
            nullable=False, unique=True,
        ),
    ]


def upgrade() -> None:
    """Create code tables, collections, pages, property values and filters."""
    _code_table('property_type', PROPERTY_TYPES)
    _code_table('filter_type', FILTER_TYPES)
    _code_table('sort_type', SORT_TYPES)

    op.create_table(
        'collection',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sort_by_prop_id', sa.Integer(), nullable=True),
        sa.Column('sort_type_id', sa.Integer(), sa.ForeignKey('sort_type.id'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table(
        'property',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('order', sa.SmallInteger(), nullable=True),
        sa.Column('type_id', sa.Integer(), sa.ForeignKey('property_type.id'), nullable=False),
        sa.Column(
            'collection_id', sa.Integer(),
            sa.ForeignKey('collection.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_property_collection_id'), 'property', ['collection_id'], unique=False)

    # collection and property reference each other
    with op.batch_alter_table('collection') as batch_op:
        batch_op.create_foreign_key(
            'fk_collection_sort_by_prop_id', 'property',
            ['sort_by_prop_id'], ['id'], ondelete='SET NULL',
        )

    op.create_table(
        'page',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column(
            'collection_id', sa.Integer(),
            sa.ForeignKey('collection.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_page_collection_id'), 'page', ['collection_id'], unique=False)

    op.create_table(
        'page_content',
        sa.Column('page_id', sa.Integer(), sa.ForeignKey('page.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('page_id')
    )

    for suffix, column_type in PROPVAL_TYPES:
        op.create_table(
            f'propval_{suffix}',
            sa.Column('page_id', sa.Integer(), sa.ForeignKey('page.id', ondelete='CASCADE'), nullable=False),
            sa.Column(
                'prop_id', sa.Integer(),
                sa.ForeignKey('property.id', ondelete='CASCADE'), nullable=False,
            ),
            sa.Column('value', column_type, nullable=False),
            sa.PrimaryKeyConstraint('page_id', 'prop_id')
        )

    op.create_table(
        'propval_multistr',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('page_id', sa.Integer(), sa.ForeignKey('page.id', ondelete='CASCADE'), nullable=False),
        sa.Column('prop_id', sa.Integer(), sa.ForeignKey('property.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('page_id', 'prop_id', name='uq_propval_multistr_page_prop')
    )
    op.create_table(
        'propval_multistr__value',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column(
            'propval_multistr_id', sa.Integer(),
            sa.ForeignKey('propval_multistr.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('value', sa.String(length=STR_LENGTH), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        op.f('ix_propval_multistr__value_propval_multistr_id'),
        'propval_multistr__value', ['propval_multistr_id'], unique=False,
    )

    for suffix, column_type in FILTER_VALUE_TYPES:
        op.create_table(
            f'filter_{suffix}',
            *_filter_columns(),
            sa.Column('value', column_type, nullable=False),
            sa.PrimaryKeyConstraint('id')
        )

    for suffix, column_type in FILTER_RANGE_TYPES:
        op.create_table(
            f'filter_{suffix}_range',
            *_filter_columns(),
            sa.Column('start', column_type, nullable=False),
            sa.Column('end', column_type, nullable=False),
            sa.PrimaryKeyConstraint('id')
        )


def downgrade() -> None:
    """Drop every table, children first."""
    for suffix, _ in FILTER_RANGE_TYPES:
        op.drop_table(f'filter_{suffix}_range')
    for suffix, _ in FILTER_VALUE_TYPES:
        op.drop_table(f'filter_{suffix}')

    op.drop_index(
        op.f('ix_propval_multistr__value_propval_multistr_id'),
        table_name='propval_multistr__value',
    )
    op.drop_table('propval_multistr__value')
    op.drop_table('propval_multistr')
    for suffix, _ in PROPVAL_TYPES:
        op.drop_table(f'propval_{suffix}')

    op.drop_table('page_content')
    op.drop_index(op.f('ix_page_collection_id'), table_name='page')
    op.drop_table('page')

    with op.batch_alter_table('collection') as batch_op:
        batch_op.drop_constraint('fk_collection_sort_by_prop_id', type_='foreignkey')
    op.drop_index(op.f('ix_property_collection_id'), table_name='property')
    op.drop_table('property')
    op.drop_table('collection')

    op.drop_table('sort_type')
    op.drop_table('filter_type')
    op.drop_table('property_type')
