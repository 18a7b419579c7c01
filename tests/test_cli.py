import pytest

import main
from schemas.common import SubmissionStatus


@pytest.fixture
async def ready_context(memory_context):
    await memory_context.start()
    yield memory_context
    await memory_context.stop()


@pytest.fixture
def lab(ready_context, user_named, future_due):
    teacher = user_named(ready_context.store, "Tom Teacher")
    return ready_context.intake.create_assignment(teacher, "Lab", future_due)


@pytest.fixture
def upload(tmp_path):
    path = tmp_path / "answer.txt"
    path.write_bytes(b"42")
    return str(path)


async def test_submit_files_signs_in_and_out(ready_context, lab, upload):
    ok = await main.submit_files(ready_context, "jane doe", "secret", lab.id, [upload], text_response="see file")

    assert ok is True
    submission = ready_context.store.submissions[0]
    assert submission.status == SubmissionStatus.ON_TIME
    assert submission.files[0].name == "answer.txt"
    assert ready_context.auth.current_user is None


async def test_submit_files_wrong_password(ready_context, lab, upload, capsys):
    assert await main.submit_files(ready_context, "Jane Doe", "bad", lab.id, [upload]) is False
    assert "wrong credentials" in capsys.readouterr().out


async def test_submit_files_requires_student(ready_context, lab, upload):
    assert await main.submit_files(ready_context, "Tom Teacher", "chalk", lab.id, [upload]) is False
    assert ready_context.store.submissions == []
    assert ready_context.auth.current_user is None


async def test_submit_files_missing_file_submits_nothing(ready_context, lab, tmp_path, upload):
    paths = [upload, str(tmp_path / "missing.pdf")]

    assert await main.submit_files(ready_context, "Jane Doe", "secret", lab.id, paths) is False
    assert ready_context.store.submissions == []


async def test_submit_files_other_section(ready_context, lab, upload):
    assert await main.submit_files(ready_context, "Gina Galilei", "stars", lab.id, [upload]) is False


async def test_print_stats(ready_context, lab, capsys):
    main.print_stats(ready_context)

    out = capsys.readouterr().out
    assert "EINSTEIN_G11" in out
    assert "GALILEI_G12" in out
    assert "NONE" not in out


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        main.build_parser().parse_args([])

    args = main.build_parser().parse_args(["submit", "Jane Doe", "pw", "a-1", "x.pdf", "--text", "hi"])
    assert args.files == ["x.pdf"]
    assert args.text == "hi"
