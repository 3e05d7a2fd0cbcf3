"""Tests for StatementBuilder compilation."""

import pytest

from dynsql import Increment, StatementConfig, StatementKind, ValueSet, delete, insert, insert_or_update, select, update
from dynsql.exceptions import (
    MissingTableError,
    MissingValuesError,
    RiskLevel,
    UnsafeBulkDeleteError,
    UnsafeBulkUpdateError,
    UnsafeSQLError,
    UnsupportedArgumentTypeError,
)

BARE = StatementConfig(quote_symbol="")
POSTGRES = StatementConfig(dialect="postgres")


# INSERT


def test_insert_basic() -> None:
    sb = insert().table("users").values(ValueSet(name="alice", age=30))

    assert sb.to_sql() == "INSERT INTO users (`name`,`age`) VALUES (?,?)"
    assert sb.arguments == ["alice", 30]


def test_insert_ignore() -> None:
    sb = insert(ignore=True).table("users").add_value("id", 1)

    assert sb.to_sql() == "INSERT IGNORE INTO users (`id`) VALUES (?)"


@pytest.mark.parametrize("count", [1, 2, 5, 12])
def test_insert_fields_placeholders_and_arguments_match(count: int) -> None:
    sb = insert().table("t").values({f"c{i}": i for i in range(count)})

    sql = sb.to_sql()
    fields, placeholders = sql.split(" VALUES ")

    assert fields.count("`") // 2 == count
    assert placeholders.count("?") == count
    assert len(sb.arguments) == count


def test_insert_binds_increment_delta() -> None:
    sb = insert().table("counters").values({"name": "hits", "total": Increment(5, "other")})

    assert sb.to_sql() == "INSERT INTO counters (`name`,`total`) VALUES (?,?)"
    assert sb.arguments == ["hits", 5]


def test_insert_without_table_fails() -> None:
    with pytest.raises(MissingTableError):
        insert().add_value("a", 1).to_sql()


def test_insert_without_values_fails() -> None:
    with pytest.raises(MissingValuesError):
        insert().table("users").to_sql()


def test_insert_quotes_follow_dialect() -> None:
    sb = insert(config=POSTGRES).table("users").add_value("name", "a")

    assert sb.to_sql() == 'INSERT INTO users ("name") VALUES (?)'


# DELETE


def test_delete_without_where_is_unsafe() -> None:
    with pytest.raises(UnsafeBulkDeleteError) as exc_info:
        delete().from_("users").to_sql()

    assert isinstance(exc_info.value, UnsafeSQLError)
    assert exc_info.value.risk_level is RiskLevel.HIGH
    assert exc_info.value.table == "users"


def test_delete_with_where() -> None:
    sb = delete().from_("users").where("id=?")

    assert sb.to_sql() == "DELETE users FROM users WHERE id=?"
    assert sb.arguments == []


def test_delete_unsafe_override() -> None:
    assert delete().from_("users").unsafe().to_sql() == "DELETE users FROM users"


def test_delete_unsafe_can_be_switched_off() -> None:
    with pytest.raises(UnsafeBulkDeleteError):
        delete().from_("users").unsafe().unsafe(False).to_sql()


def test_delete_without_table_is_empty() -> None:
    assert delete().to_sql() == ""


# UPDATE


def test_update_without_where_is_unsafe() -> None:
    with pytest.raises(UnsafeBulkUpdateError):
        update().table("users").add_value("a", 1).to_sql()


def test_update_plain_values() -> None:
    sb = update().table("users").values(ValueSet(name="bob", age=31)).where("id=?")

    assert sb.to_sql() == "UPDATE users SET `name`=?,`age`=? WHERE id=?"
    assert sb.arguments == ["bob", 31]


def test_update_increment_self_reference() -> None:
    sb = update(config=BARE).table("users").add_value("score", Increment(5)).where("id=1")

    assert sb.to_sql() == "UPDATE users SET score=score+5 WHERE id=1"
    assert sb.arguments == []


def test_update_increment_negative_with_base_field() -> None:
    sb = update(config=BARE).table("users").add_value("score", Increment(-3, "base_score")).where("id=1")

    assert "score=base_score-3" in sb.to_sql()
    assert sb.arguments == []


def test_update_increment_quotes_only_target_field() -> None:
    sb = update().table("users").values({"name": "x", "score": Increment(2)}).where("id=1")

    assert sb.to_sql() == "UPDATE users SET `name`=?,`score`=score+2 WHERE id=1"
    assert sb.arguments == ["x"]


def test_update_unsafe_override() -> None:
    sb = update().table("users").add_value("active", False).unsafe()

    assert sb.to_sql() == "UPDATE users SET `active`=?"


def test_update_without_values_fails() -> None:
    with pytest.raises(MissingValuesError):
        update().table("users").where("id=1").to_sql()


def test_update_without_table_is_empty() -> None:
    assert update().add_value("a", 1).to_sql() == ""


# INSERT ... ON DUPLICATE KEY UPDATE


def test_insert_or_update() -> None:
    sb = (
        insert_or_update()
        .table("stats")
        .values({"id": 1, "hits": 1})
        .update_values({"hits": Increment(1), "label": "seen"})
    )

    assert sb.to_sql() == (
        "INSERT INTO stats (`id`,`hits`) VALUES (?,?) ON DUPLICATE KEY UPDATE `hits`=hits+1,`label`=?"
    )
    assert sb.arguments == [1, 1, "seen"]


def test_insert_or_update_binds_primary_values_as_is() -> None:
    increment = Increment(4)
    sb = insert_or_update().table("stats").add_value("hits", increment).add_update_value("hits", 0)

    sb.to_sql()

    assert sb.arguments == [increment, 0]


def test_insert_or_update_requires_both_value_sets() -> None:
    with pytest.raises(MissingValuesError):
        insert_or_update().table("stats").add_update_value("a", 1).to_sql()
    with pytest.raises(MissingValuesError):
        insert_or_update().table("stats").add_value("a", 1).to_sql()


def test_insert_or_update_without_table_is_empty() -> None:
    assert insert_or_update().add_value("a", 1).add_update_value("a", 2).to_sql() == ""


# SELECT


def test_select_defaults_to_star() -> None:
    assert select().from_("users").to_sql() == "SELECT * FROM users"


def test_select_without_table() -> None:
    assert select("1").to_sql() == "SELECT 1"


def test_select_all_clauses_mysql() -> None:
    sb = (
        select("dept, COUNT(*) AS n")
        .from_("users")
        .where("age > ?")
        .group_by("dept")
        .order_by("n DESC")
        .limit(10, 20)
    )

    assert sb.to_sql() == (
        "SELECT dept, COUNT(*) AS n FROM users WHERE age > ? GROUP BY dept ORDER BY n DESC LIMIT 20,10"
    )


def test_select_limit_default_offset() -> None:
    assert select().from_("t").limit(5).to_sql() == "SELECT * FROM t LIMIT 0,5"


def test_select_limit_with_empty_dialect() -> None:
    sb = select(config=StatementConfig(dialect="")).from_("t").limit(5)

    assert sb.to_sql().endswith(" LIMIT 0,5")


@pytest.mark.parametrize("dialect", ["postgres", "sqlite", "tsql", "oracle"])
def test_select_never_emits_limit_outside_mysql(dialect: str) -> None:
    sb = select(config=StatementConfig(dialect=dialect)).from_("t").where("a=1").limit(5, 10)

    assert "LIMIT" not in sb.to_sql()


# compilation behaviour


def test_arguments_reset_between_compiles() -> None:
    sb = insert().table("t").add_value("a", 1)

    sb.to_sql()
    sb.to_sql()

    assert sb.arguments == [1]


def test_arguments_is_a_copy() -> None:
    sb = insert().table("t").add_value("a", 1)
    sb.to_sql()

    sb.arguments.append(2)

    assert sb.get_args() == [1]


def test_to_sql_render_literal() -> None:
    sb = update().table("users").values({"name": "O'Neil", "score": Increment(-1)}).where("id=7")

    assert sb.to_sql(render_literal=True) == "UPDATE users SET `name`='ONeil',`score`=score-1 WHERE id=7"


def test_render_literal_leaves_no_markers() -> None:
    sb = insert().table("t").values({"a": 1, "b": "x", "c": None, "d": 2.5, "e": True})

    rendered = sb.to_sql(render_literal=True)

    assert "?" not in rendered
    assert rendered.endswith("VALUES (1,'x',NULL,2.5,true)")


def test_render_literal_unsupported_argument() -> None:
    sb = insert().table("t").add_value("a", object())

    with pytest.raises(UnsupportedArgumentTypeError):
        sb.to_sql(render_literal=True)


def test_compile_error_binds_nothing() -> None:
    sb = insert().table("t").add_value("a", 1)
    sb.to_sql()

    sb.table("")
    with pytest.raises(MissingTableError):
        sb.to_sql()

    assert sb.arguments == []


def test_build_returns_sql_and_arguments() -> None:
    compiled = insert().table("t").add_value("a", 1).add_value("b", "x").build()

    assert compiled.sql == "INSERT INTO t (`a`,`b`) VALUES (?,?)"
    assert compiled.arguments == (1, "x")

    sql, args = compiled
    assert sql == compiled.sql
    assert args == [1, "x"]


def test_builder_kind_and_repr() -> None:
    sb = select().from_("users")

    assert sb.kind is StatementKind.SELECT
    assert "SELECT" in repr(sb)
    assert "users" in repr(sb)


def test_values_accepts_plain_mapping() -> None:
    sb = update().table("t").values({"a": 1}).where("id=1")
    sb.add_value("b", 2)

    assert sb.to_sql() == "UPDATE t SET `a`=?,`b`=? WHERE id=1"


def test_with_config_overrides_default() -> None:
    sb = select().from_("t").limit(1).with_config(POSTGRES)

    assert sb.config is POSTGRES
    assert sb.to_sql() == "SELECT * FROM t"
