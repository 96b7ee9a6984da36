"""Tests for relationship cardinality inference."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "packages" / "core_engine" / "src"))

from erd_core.canonical import build_canonical
from erd_core.dsl import parse_dsl
from erd_core.relationships import find_junctions, infer_relationships, junction_targets
from erd_core.types import Cardinality

FIXTURES = Path(__file__).resolve().parent / "fixtures"

CATEGORY_PRODUCT = """
model Category {
  id       Int       @id
  products Product[]
}

model Product {
  id         Int      @id
  categoryId Int
  category   Category @relation(fields: [categoryId], references: [id])
}
"""

PRODUCT_SUPPLIER = """
model Product {
  id        Int               @id
  suppliers ProductSupplier[]
}

model Supplier {
  id       Int               @id
  products ProductSupplier[]
}

model ProductSupplier {
  productId  Int
  supplierId Int
  product    Product  @relation(fields: [productId], references: [id])
  supplier   Supplier @relation(fields: [supplierId], references: [id])
}

model Audit {
  id      Int               @id
  entries ProductSupplier[]
}
"""


def _infer(text):
    models, _ = build_canonical(parse_dsl(text))
    return infer_relationships(models)


def _by_field(rels):
    return {(r.source_model, r.source_field): r for r in rels}


class TestPassOne:
    def test_one_to_many_and_many_to_one_pair(self):
        rels = _infer(CATEGORY_PRODUCT)
        assert [(r.source_model, r.target_model, r.cardinality) for r in rels] == [
            ("Category", "Product", Cardinality.ONE_TO_MANY),
            ("Product", "Category", Cardinality.MANY_TO_ONE),
        ]
        assert rels[0].display_label == "products (1:N)"
        assert rels[1].display_label == "categoryId → id (N:1)"
        assert rels[1].foreign_key_columns == ("categoryId",)
        assert rels[1].referenced_columns == ("id",)

    def test_handles(self):
        rel = _infer(CATEGORY_PRODUCT)[1]
        assert rel.source_handle == "Product-category-source"
        assert rel.target_handle == "Category-target"

    def test_one_to_one_labels(self):
        rels = _infer(
            """
            enum Mood {
              HAPPY
            }
            model User {
              id      Int      @id
              mood    Mood
              profile Profile?
              avatar  Image    @relation("UserAvatar")
            }
            """
        )
        labels = {r.source_field: (r.cardinality, r.display_label) for r in rels}
        assert labels == {
            "mood": (Cardinality.ONE_TO_ONE, "mood"),
            "profile": (Cardinality.ONE_TO_ONE, "profile"),
            "avatar": (Cardinality.ONE_TO_ONE, "avatar (1:1)"),
        }

    def test_scalar_fields_emit_nothing(self):
        assert _infer("model Plain {\n  id Int @id\n  name String\n}\n") == ()

    def test_enum_reference_needs_only_models(self):
        models, enums = build_canonical(parse_dsl("model Pet {\n  id Int \n  kind Kind\n}\nenum Kind {\n  CAT\n}\n"))
        assert [e.name for e in enums] == ["Kind"]
        rels = infer_relationships(models)
        assert [(r.target_model, r.cardinality, r.display_label) for r in rels] == [
            ("Kind", Cardinality.ONE_TO_ONE, "kind"),
        ]

    def test_order_follows_declaration(self):
        rels = _infer((FIXTURES / "shop.prisma").read_text(encoding="utf-8"))
        assert [(r.source_model, r.source_field) for r in rels] == [
            ("User", "role"),
            ("User", "orders"),
            ("User", "profile"),
            ("Profile", "user"),
            ("Order", "user"),
            ("Product", "suppliers"),
            ("Supplier", "products"),
            ("ProductSupplier", "product"),
            ("ProductSupplier", "supplier"),
        ]


class TestJunctions:
    def test_junction_detection(self):
        models, _ = build_canonical(parse_dsl(PRODUCT_SUPPLIER))
        assert find_junctions(models) == {"ProductSupplier": ("Product", "Supplier")}
        assert junction_targets(models[0]) is None

    def test_two_foreign_keys_without_relations_is_not_a_junction(self):
        models, _ = build_canonical(parse_dsl("model Pair {\n  leftId Int\n  rightId Int\n}\n"))
        assert find_junctions(models) == {}

    def test_relations_to_one_model_is_not_a_junction(self):
        models, _ = build_canonical(
            parse_dsl(
                """
                model Transfer {
                  fromId Int
                  toId   Int
                  from   Account @relation(fields: [fromId], references: [id])
                  to     Account @relation(fields: [toId], references: [id])
                }
                """
            )
        )
        assert find_junctions(models) == {}

    def test_many_to_many_upgrade(self):
        rels = _by_field(_infer(PRODUCT_SUPPLIER))

        suppliers = rels[("Product", "suppliers")]
        assert suppliers.cardinality == Cardinality.MANY_TO_MANY
        assert suppliers.display_label == "suppliers (M:N via ProductSupplier)"

        products = rels[("Supplier", "products")]
        assert products.cardinality == Cardinality.MANY_TO_MANY
        assert products.display_label == "products (M:N via ProductSupplier)"

    def test_junction_side_relations_upgraded(self):
        rels = _by_field(_infer(PRODUCT_SUPPLIER))
        product = rels[("ProductSupplier", "product")]
        assert product.cardinality == Cardinality.MANY_TO_MANY
        assert product.display_label == "product (M:N via ProductSupplier)"
        assert product.foreign_key_columns == ("productId",)

    def test_unlinked_list_into_junction(self):
        entries = _by_field(_infer(PRODUCT_SUPPLIER))[("Audit", "entries")]
        assert entries.cardinality == Cardinality.MANY_TO_MANY
        assert entries.display_label == "entries (M:N)"

    def test_upgrade_keeps_order(self):
        order = [(r.source_model, r.source_field) for r in _infer(PRODUCT_SUPPLIER)]
        assert order == [
            ("Product", "suppliers"),
            ("Supplier", "products"),
            ("ProductSupplier", "product"),
            ("ProductSupplier", "supplier"),
            ("Audit", "entries"),
        ]
