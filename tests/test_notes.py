from gridbook.notes import NoteStore, sanitize_project_id


def test_sanitize_replaces_path_separators():
    assert sanitize_project_id("grid/ops\\2024") == "grid_ops_2024"


def test_notes_round_trip(tmp_path):
    store = NoteStore(tmp_path / "notes")

    path = store.save("P-100/phase 2", "Budget review on Friday")

    assert path == tmp_path / "notes" / "P-100_phase 2.txt"
    assert store.load("P-100/phase 2") == "Budget review on Friday"


def test_missing_notes_load_as_empty(tmp_path):
    store = NoteStore(tmp_path / "never-created")

    assert store.load("unknown") == ""
    assert not (tmp_path / "never-created").exists()
