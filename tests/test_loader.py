"""Tests for CurriculumLoader."""

from learnpath.classroom import CurriculumLoader

from factories import curriculum_payload, envelope, error_envelope


class TestLoad:
    """Test curriculum fetch outcomes."""

    def test_success_selects_first_lesson(self, backend, client):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        loader = CurriculumLoader(client, "course-1")

        curriculum = loader.load()

        assert curriculum is not None
        assert loader.is_loaded
        assert loader.error is None
        assert loader.initial_lesson_id == "l1"
        assert loader.initial_module_id == "m1"
        assert [lesson.id for lesson in loader.all_lessons()] == ["l1", "l2", "l3", "l4"]

    def test_zero_modules(self, backend, client):
        payload = curriculum_payload()
        payload["modules"] = []
        backend.on("GET", "/api/courses", envelope(payload))
        loader = CurriculumLoader(client, "course-1")

        assert loader.load() is None
        assert loader.error == "No curriculum found for this course"
        assert loader.curriculum is None
        assert loader.initial_lesson_id is None

    def test_server_error(self, backend, client):
        backend.on("GET", "/api/courses", error_envelope("boom"), status=500)
        loader = CurriculumLoader(client, "course-1")

        assert loader.load() is None
        assert loader.error == "Failed to fetch curriculum"

    def test_malformed_payload(self, backend, client):
        backend.on("GET", "/api/courses", envelope({"modules": [{"title": "No id"}]}))
        loader = CurriculumLoader(client, "course-1")

        assert loader.load() is None
        assert loader.error == "Failed to load course content"

    def test_first_module_without_lessons(self, backend, client):
        payload = curriculum_payload()
        payload["modules"][0]["lessons"] = []
        backend.on("GET", "/api/courses", envelope(payload))
        loader = CurriculumLoader(client, "course-1")

        assert loader.load() is not None
        assert loader.initial_lesson_id is None
        assert loader.initial_module_id is None

    def test_reload_replaces_wholesale(self, backend, client):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        loader = CurriculumLoader(client, "course-1")
        loader.load()

        payload = curriculum_payload()
        payload["modules"] = payload["modules"][1:]
        backend.on("GET", "/api/courses", envelope(payload))
        loader.load()

        assert [m.id for m in loader.curriculum.modules] == ["m2"]
        assert loader.initial_lesson_id == "l4"
        assert loader.lesson("l1") is None

    def test_failed_reload_clears_previous_tree(self, backend, client):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        loader = CurriculumLoader(client, "course-1")
        loader.load()

        backend.on("GET", "/api/courses", error_envelope("boom"), status=500)
        loader.load()

        assert loader.curriculum is None
        assert loader.error == "Failed to fetch curriculum"

    def test_retry_after_error_clears_it(self, backend, client):
        backend.on("GET", "/api/courses", error_envelope("boom"), status=500)
        loader = CurriculumLoader(client, "course-1")
        loader.load()

        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        loader.load()
        assert loader.error is None
        assert loader.is_loaded


class TestActiveGuard:
    def test_result_discarded_after_close(self, backend, client):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        loader = CurriculumLoader(client, "course-1", is_active=lambda: False)

        assert loader.load() is None
        assert loader.curriculum is None
        assert loader.error is None

    def test_error_discarded_after_close(self, backend, client):
        backend.on("GET", "/api/courses", error_envelope("boom"), status=500)
        loader = CurriculumLoader(client, "course-1", is_active=lambda: False)

        loader.load()
        assert loader.error is None


class TestLookups:
    def test_lookups_before_load(self, client):
        loader = CurriculumLoader(client, "course-1")
        assert loader.all_lessons() == []
        assert loader.lesson("l1") is None
        assert loader.module_of("l1") is None

    def test_lookups(self, backend, client):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        loader = CurriculumLoader(client, "course-1")
        loader.load()
        assert loader.lesson("l2").title == "Reading"
        assert loader.lesson(None) is None
        assert loader.module_of("l4").id == "m2"
