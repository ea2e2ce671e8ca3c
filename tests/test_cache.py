"""Tests for the identity cache."""

import threading

import pytest

from recordspine.cache import IdentityCache
from tests._support.records import Course, School, Student


def _student(pk, name="s"):
    student = Student(name=name)
    student.id = pk
    return student


@pytest.fixture
def cache(metadata):
    return IdentityCache(metadata, capacity=3)


class TestIdentity:
    def test_key_uses_table_name(self, cache):
        assert cache.key(Student, 7) == "Student@7"
        assert cache.key(Course, 7) == "Courses@7"

    def test_put_and_get(self, cache):
        alice = _student(1, "Alice")
        cache.put(alice)
        assert cache.get(Student, 1) is alice
        assert alice in cache

    def test_miss(self, cache):
        assert cache.get(Student, 42) is None

    def test_same_id_different_tables(self, cache):
        student = _student(1)
        school = School(name="North")
        school.id = 1
        cache.put(student)
        cache.put(school)
        assert cache.get(Student, 1) is student
        assert cache.get(School, 1) is school

    def test_unsaved_record_is_not_cached(self, cache):
        cache.put(Student(name="draft"))
        assert len(cache) == 0

    def test_newer_instance_replaces_older(self, cache):
        first = _student(1)
        second = _student(1)
        cache.put(first)
        cache.put(second)
        assert cache.get(Student, 1) is second
        assert first not in cache
        assert len(cache) == 1


class TestEviction:
    def test_least_recently_used_is_evicted(self, cache):
        for pk in (1, 2, 3, 4):
            cache.put(_student(pk))
        assert cache.get(Student, 1) is None
        assert cache.keys() == ["Student@2", "Student@3", "Student@4"]

    def test_get_protects_entry(self, cache):
        for pk in (1, 2, 3):
            cache.put(_student(pk))
        cache.get(Student, 1)
        cache.put(_student(4))

        assert cache.get(Student, 1) is not None
        assert cache.get(Student, 2) is None

    def test_size_never_exceeds_capacity(self, metadata):
        cache = IdentityCache(metadata, capacity=10)
        for pk in range(100):
            cache.put(_student(pk))
        assert cache.size() == 10 == cache.capacity

    def test_invalid_capacity(self, metadata):
        with pytest.raises(ValueError):
            IdentityCache(metadata, capacity=0)


class TestRemoval:
    def test_remove(self, cache):
        alice = _student(1)
        cache.put(alice)
        cache.remove(alice)
        assert cache.get(Student, 1) is None

    def test_remove_absent_is_noop(self, cache):
        cache.remove(_student(9))
        cache.remove(Student(name="draft"))
        assert len(cache) == 0

    def test_clear(self, cache):
        for pk in (1, 2):
            cache.put(_student(pk))
        cache.clear()
        assert len(cache) == 0
        assert cache.keys() == []


class TestConcurrency:
    def test_parallel_puts_respect_capacity(self, metadata):
        cache = IdentityCache(metadata, capacity=50)

        def worker(offset):
            for pk in range(offset, offset + 200):
                cache.put(_student(pk))
                cache.get(Student, pk - 1)

        threads = [threading.Thread(target=worker, args=(i * 1000,)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert cache.size() == 50

    def test_shared_lock(self, metadata):
        lock = threading.RLock()
        cache = IdentityCache(metadata, lock=lock)
        with lock:
            cache.put(_student(1))
            assert cache.get(Student, 1) is not None
