"""Tests for the fluent SQL builder."""

import datetime
import uuid

import pytest

from recordspine.core.errors import NotInitializedError
from recordspine.metadata import ConflictAction
from recordspine.query import (
    Delete,
    Insert,
    RenderedStatement,
    Select,
    SelectColumn,
    Update,
    normalize_argument,
)
from tests._support.records import Course, Grade, School, Student


class FakeExecutor:
    """Records what a bound builder asks the runtime to do."""

    def __init__(self, single=None, scalar=0, rowcount=0):
        self.calls = []
        self.single = single
        self.scalar = scalar
        self.rowcount = rowcount

    def run_query(self, record_type, statement):
        self.calls.append(("query", record_type, statement))
        return []

    def run_query_single(self, record_type, statement):
        self.calls.append(("single", record_type, statement))
        return self.single

    def run_mutation(self, record_type, statement):
        self.calls.append(("mutation", record_type, statement))
        return self.rowcount

    def run_scalar(self, statement):
        self.calls.append(("scalar", statement))
        return self.scalar

    def delete_record(self, record):
        self.calls.append(("delete", record))


class TestNormalization:
    def test_bool(self):
        assert normalize_argument(True) == 1
        assert normalize_argument(False) == 0

    def test_model_becomes_id(self):
        school = School(name="North")
        school.id = 12
        assert normalize_argument(school) == 12

    def test_enum_becomes_name(self):
        assert normalize_argument(Grade.SENIOR) == "SENIOR"

    def test_serialized_value(self, metadata):
        assert normalize_argument(datetime.date(2024, 1, 2), metadata) == "2024-01-02"
        token = uuid.UUID(int=1)
        assert normalize_argument(token, metadata) == str(token)

    def test_primitives_pass_through(self):
        for value in (None, 3, 2.5, "x", b"\x00"):
            assert normalize_argument(value) == value


class TestSelect:
    def test_basic(self):
        statement = Select().from_(Student).render()
        assert statement == RenderedStatement("SELECT * FROM Student")

    def test_where_chain_keeps_call_order(self):
        statement = Select().from_(Student).where("age > ?", 18).or_("active = ?", True).render()
        assert statement.sql == "SELECT * FROM Student WHERE age > ? OR active = ?"
        assert statement.arguments == (18, 1)

    def test_where_twice_is_and(self):
        sql = Select().from_(Student).where("age > ?", 1).where("age < ?", 9).and_("name = ?", "x").to_sql()
        assert sql == "SELECT * FROM Student WHERE age > ? AND age < ? AND name = ?"

    def test_uses_registered_table_name(self, metadata):
        assert Select(metadata=metadata).from_(Course).to_sql() == "SELECT * FROM Courses"

    def test_columns_and_aliases(self):
        sql = Select("name", SelectColumn("age", "years")).from_(Student).to_sql()
        assert sql == "SELECT name, age AS years FROM Student"

    def test_distinct_and_all(self):
        assert Select("name").distinct().from_(Student).to_sql() == "SELECT DISTINCT name FROM Student"
        assert Select().all().from_(Student).to_sql() == "SELECT ALL * FROM Student"

    def test_group_having_order_limit_offset(self):
        statement = (
            Select("age", "COUNT(*)")
            .from_(Student)
            .where("active = ?", True)
            .group_by("age")
            .having("COUNT(*) > ?", 2)
            .order_by("age DESC")
            .limit(10)
            .offset(20)
            .render()
        )
        assert statement.sql == (
            "SELECT age, COUNT(*) FROM Student WHERE active = ? GROUP BY age "
            "HAVING COUNT(*) > ? ORDER BY age DESC LIMIT 10 OFFSET 20"
        )
        assert statement.arguments == (1, 2)

    def test_render_is_idempotent(self):
        query = Select().from_(Student).where("name = ?", "Alice").order_by("name")
        assert query.render() == query.render()
        assert query.render_count() == query.render_count()

    def test_render_single_does_not_mutate(self):
        query = Select().from_(Student).limit(5)
        assert query.render_single().sql == "SELECT * FROM Student LIMIT 1"
        assert query.to_sql() == "SELECT * FROM Student LIMIT 5"


class TestJoins:
    def test_join_on_with_alias(self):
        statement = (
            Select("s.*")
            .from_(Student)
            .as_("s")
            .inner_join(School)
            .as_("c")
            .on("s.school = c.Id AND c.city = ?", "Oslo")
            .where("s.age > ?", 18)
            .render()
        )
        assert statement.sql == (
            "SELECT s.* FROM Student AS s INNER JOIN School AS c "
            "ON s.school = c.Id AND c.city = ? WHERE s.age > ?"
        )
        assert statement.arguments == ("Oslo", 18)

    def test_join_using(self):
        sql = Select().from_(Student).left_join(School).using("name").to_sql()
        assert sql == "SELECT * FROM Student LEFT JOIN School USING (name)"

    @pytest.mark.parametrize(
        ("method", "keyword"),
        [("join", "JOIN"), ("outer_join", "OUTER JOIN"), ("cross_join", "CROSS JOIN")],
    )
    def test_join_types(self, method, keyword):
        query = getattr(Select().from_(Student), method)(School).on("1 = 1")
        assert query.to_sql() == f"SELECT * FROM Student {keyword} School ON 1 = 1"


class TestCountAndExists:
    def test_count_omits_order_by(self):
        query = Select().from_(Student).where("age > ?", 18).order_by("name")
        statement = query.render_count()
        assert statement.sql == "SELECT COUNT(*) FROM Student WHERE age > ?"
        assert statement.arguments == (18,)

    def test_exists(self):
        query = Select().from_(Student).where("name = ?", "Alice").order_by("name")
        assert query.render_exists().sql == (
            "SELECT EXISTS(SELECT 1 FROM Student WHERE name = ?)"
        )


class TestDelete:
    def test_render(self):
        statement = Delete().from_(Student).where("name = ?", "Alice").render()
        assert statement.sql == "DELETE FROM Student WHERE name = ?"
        assert statement.arguments == ("Alice",)

    def test_delete_one_loads_then_deletes(self):
        victim = Student(name="Alice")
        victim.id = 1
        executor = FakeExecutor(single=victim)

        Delete(executor=executor).from_(Student).where("name = ?", "Alice").delete_one()

        (kind, record_type, statement), deleted = executor.calls
        assert kind == "single"
        assert statement.sql == "SELECT Student.* FROM Student WHERE name = ? LIMIT 1"
        assert deleted == ("delete", victim)

    def test_delete_one_uses_alias(self):
        executor = FakeExecutor()
        Delete(executor=executor).from_(Student).as_("s").where("s.age > ?", 3).delete_one()
        statement = executor.calls[0][2]
        assert statement.sql == "SELECT s.* FROM Student AS s WHERE s.age > ? LIMIT 1"

    def test_delete_one_without_match(self):
        executor = FakeExecutor(single=None)
        Delete(executor=executor).from_(Student).delete_one()
        assert [c[0] for c in executor.calls] == ["single"]

    def test_fetch_one_on_delete_is_rejected(self):
        with pytest.raises(TypeError):
            Delete(executor=FakeExecutor()).from_(Student).fetch_one()

    def test_delete_one_on_select_is_rejected(self):
        with pytest.raises(TypeError):
            Select(executor=FakeExecutor()).from_(Student).delete_one()


class TestExecution:
    def test_unbound_builder(self):
        with pytest.raises(NotInitializedError):
            Select().from_(Student).execute()

    def test_select_execute(self):
        executor = FakeExecutor()
        Select(executor=executor).from_(Student).execute()
        assert executor.calls[0][0] == "query"

    def test_delete_execute_is_a_mutation(self):
        executor = FakeExecutor()
        assert Delete(executor=executor).from_(Student).execute() is None
        assert executor.calls[0][0] == "mutation"

    def test_fetch_one_limits(self):
        executor = FakeExecutor()
        Select(executor=executor).from_(Student).order_by("age").fetch_one()
        assert executor.calls[0][2].sql == "SELECT * FROM Student ORDER BY age LIMIT 1"

    def test_count_and_exists(self):
        executor = FakeExecutor(scalar=3)
        query = Select(executor=executor).from_(Student)
        assert query.count() == 3
        assert query.exists() is True
        assert Select(executor=FakeExecutor(scalar=0)).from_(Student).exists() is False


class TestUpdate:
    def test_render(self):
        statement = Update(Student).set("age = ?, active = ?", 31, False).where("name = ?", "Alice").render()
        assert statement.sql == "UPDATE Student SET age = ?, active = ? WHERE name = ?"
        assert statement.arguments == (31, 0, "Alice")

    def test_without_where(self):
        assert Update(Student).set("active = 0").to_sql() == "UPDATE Student SET active = 0"

    def test_execute_returns_rowcount(self):
        executor = FakeExecutor(rowcount=4)
        changed = Update(Student, executor=executor).set("age = age + 1").or_("x = ?", 1).execute()
        assert changed == 4
        assert executor.calls[0][1] is Student


class TestInsert:
    def test_render(self, metadata):
        school = School(name="North")
        school.id = 5
        statement = Insert(Student, metadata=metadata).values(
            {"name": "Alice", "active": True, "grade": Grade.JUNIOR, "school": school}
        ).render()
        assert statement.sql == "INSERT INTO Student (name, active, grade, school) VALUES (?, ?, ?, ?)"
        assert statement.arguments == ("Alice", 1, "JUNIOR", 5)

    def test_conflict_action(self):
        sql = Insert(Student).values({"name": "A"}).or_conflict(ConflictAction.IGNORE).to_sql()
        assert sql == "INSERT OR IGNORE INTO Student (name) VALUES (?)"

    def test_default_values(self):
        assert Insert(Student).to_sql() == "INSERT INTO Student DEFAULT VALUES"
