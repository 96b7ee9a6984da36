"""Tests for the raw-descriptor to DSL bridge."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "packages" / "core_engine" / "src"))

from erd_core.dsl import parse_dsl
from erd_core.generators import generate_dsl
from erd_core.importers import parse_json_schema, parse_sql_ddl

FIXTURES = Path(__file__).resolve().parent / "fixtures"


class TestSQLToDSL:
    def test_users_and_posts(self):
        ddl = """
        CREATE TABLE users (
            id SERIAL PRIMARY KEY,
            email VARCHAR(255) UNIQUE NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        CREATE TABLE posts (
            id INT PRIMARY KEY,
            user_id INT NOT NULL,
            title TEXT,
            FOREIGN KEY (user_id) REFERENCES users(id)
        );
        """
        dsl = generate_dsl(parse_sql_ddl(ddl), origin="sql")
        assert dsl == (
            "// Auto-generated schema from SQL\n"
            "\n"
            "model Users {\n"
            "  id Int @id @default(autoincrement())\n"
            "  email String @unique\n"
            "  created_at DateTime? @default(now())\n"
            "}\n"
            "\n"
            "model Posts {\n"
            "  id Int @id @default(autoincrement())\n"
            "  user_id Int\n"
            "  title String?\n"
            "  users Users @relation(fields: [user_id], references: [id])\n"
            "}\n"
        )

    def test_enum_columns_and_literal_defaults(self):
        doc = parse_sql_ddl((FIXTURES / "shop.sql").read_text(encoding="utf-8"))
        dsl = generate_dsl(doc, header_comment="Imported", origin="sql")
        assert dsl.startswith("// Imported from SQL\n")
        assert "enum OrderStatus {\n  pending\n  paid\n  shipped\n}" in dsl
        assert '  status OrderStatus @default("pending")\n' in dsl
        assert "  id BigInt @id @default(autoincrement())\n" in dsl
        assert '  note String? @default("n/a, see history")\n' in dsl
        assert "  quantity Int @default(1)\n" in dsl

    def test_non_integer_primary_key_gets_no_autoincrement(self):
        dsl = generate_dsl(parse_sql_ddl("CREATE TABLE tokens (token VARCHAR(40) PRIMARY KEY);"))
        assert "  token String @id\n" in dsl

    def test_database_defaults(self):
        ddl = (
            "CREATE TABLE t (id UUID PRIMARY KEY DEFAULT gen_random_uuid(), "
            "seq INT DEFAULT nextval('t_seq'), slug TEXT DEFAULT lower('X'), gone TEXT DEFAULT NULL);"
        )
        dsl = generate_dsl(parse_sql_ddl(ddl))
        assert "  id String @id @default(uuid())\n" in dsl
        assert "  seq Int? @default(autoincrement())\n" in dsl
        assert "  slug String? @default(dbgenerated(\"lower('X')\"))\n" in dsl
        assert "  gone String?\n" in dsl

    def test_generated_text_reparses(self):
        doc = parse_sql_ddl((FIXTURES / "shop.sql").read_text(encoding="utf-8"))
        reparsed = parse_dsl(generate_dsl(doc))
        assert [t.name for t in reparsed.tables] == ["Users", "Orders", "OrderItems"]
        assert [c.name for c in reparsed.tables[1].columns] == ["id", "user_id", "status", "total", "note", "users"]


class TestJSONToDSL:
    def test_custom_format(self):
        doc = parse_json_schema((FIXTURES / "inventory.json").read_text(encoding="utf-8"))
        dsl = generate_dsl(doc, origin="json")
        assert dsl.startswith("// Auto-generated schema from JSON\n")
        assert "model Warehouses {\n  id Int @id @default(autoincrement())\n  code String @unique\n  opened_on DateTime\n}" in dsl
        assert "  quantity Int @default(0)\n" in dsl
        assert "  active Boolean @default(false)\n" in dsl
        assert "  warehouses Warehouses @relation(fields: [warehouse_id], references: [id])\n" in dsl

    def test_export_format_keeps_relations_inline(self):
        export = (
            '{"models": [{"name": "Post", "fields": ['
            '{"name": "id", "type": "Int", "isId": true},'
            '{"name": "authorId", "type": "Int"},'
            '{"name": "author", "type": "User", "relationName": "r", '
            '"relationFromFields": ["authorId"], "relationToFields": ["id"]}]}]}'
        )
        dsl = generate_dsl(parse_json_schema(export), origin="json")
        assert "model Post {\n  id Int @id\n  authorId Int\n  author User @relation(fields: [authorId], references: [id])\n}" in dsl

    def test_escaped_quotes_in_string_default(self):
        doc = parse_json_schema(
            '{"tables": [{"name": "notes", "columns": ['
            '{"name": "id", "type": "integer", "primaryKey": true},'
            '{"name": "greeting", "type": "string", "default": "say \\"hi\\""}]}]}'
        )
        dsl = generate_dsl(doc)
        assert '  greeting String @default("say \\"hi\\"")\n' in dsl


class TestDefaultExpressions:
    def test_parenthesized_function_default(self):
        dsl = generate_dsl(parse_sql_ddl("CREATE TABLE t (id INT PRIMARY KEY, at TIMESTAMP DEFAULT (now()));"))
        assert "  at DateTime? @default(now())\n" in dsl

    def test_parenthesized_string_default(self):
        dsl = generate_dsl(parse_sql_ddl("CREATE TABLE t (id INT PRIMARY KEY, label TEXT DEFAULT ('a b'));"))
        assert '  label String? @default("a b")\n' in dsl

    def test_parenthesized_expression_stays_generated(self):
        dsl = generate_dsl(parse_sql_ddl("CREATE TABLE t (id INT PRIMARY KEY, code TEXT DEFAULT (upper('x')));"))
        assert "  code String? @default(dbgenerated(\"upper('x')\"))\n" in dsl


class TestIdentifierNormalization:
    def test_enum_values_with_spaces_keep_source_value_in_map(self):
        ddl = "CREATE TYPE mood AS ENUM ('happy', 'very sad');\nCREATE TABLE people (id INT PRIMARY KEY, feeling mood);"
        dsl = generate_dsl(parse_sql_ddl(ddl))
        assert 'enum Mood {\n  happy\n  very_sad @map("very sad")\n}' in dsl
        assert [e.values for e in parse_dsl(dsl).enums] == [["happy", "very_sad"]]

    def test_column_with_space_is_mapped(self):
        dsl = generate_dsl(parse_sql_ddl('CREATE TABLE people (id INT PRIMARY KEY, "first name" TEXT);'))
        assert '  first_name String? @map("first name")\n' in dsl

    def test_table_with_space_is_pascal_cased(self):
        ddl = 'CREATE TABLE "order items" (id INT PRIMARY KEY, "order id" INT REFERENCES "order headers"(id));'
        dsl = generate_dsl(parse_sql_ddl(ddl))
        assert "model OrderItems {\n" in dsl
        assert "@relation(fields: [order_id], references: [id])" in dsl
        assert " OrderHeaders @relation(" in dsl

    def test_json_names_that_start_with_digits(self):
        export = '{"models": [{"name": "Login", "fields": [{"name": "id", "type": "Int", "isId": true}, {"name": "2fa", "type": "Boolean"}]}]}'
        dsl = generate_dsl(parse_json_schema(export))
        assert '  _2fa Boolean @map("2fa")\n' in dsl
        assert [c.name for c in parse_dsl(dsl).tables[0].columns] == ["id", "_2fa"]
