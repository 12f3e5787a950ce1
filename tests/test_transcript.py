from errors import UnknownRelationError
from transcript import Transcript


def test_turns_are_appended_in_order():
    transcript = Transcript()
    transcript.add_user("how many orders are there")
    transcript.add_assistant("There are 42 orders.", sql='select count(*) from "orders"')

    assert [t.role for t in transcript] == ["user", "assistant"]
    assert transcript.last().sql == 'select count(*) from "orders"'
    assert isinstance(transcript.turns, tuple)


def test_error_turn_fields():
    transcript = Transcript()
    error = UnknownRelationError('relation "customers" does not exist', sqlstate="42P01")
    turn = transcript.add_error(error, sql='select * from "customers"')

    assert turn.role == "assistant"
    assert turn.text == 'Error: relation "customers" does not exist'
    assert turn.error_type == "UnknownRelationError"
    assert turn.is_error


def test_dump_and_restore_verbatim():
    transcript = Transcript()
    transcript.add_user("how many orders are there")
    transcript.add_error(UnknownRelationError("boom"), sql="select 1", rows=[{"n": 1}])

    restored = Transcript.restore(transcript.dump())

    assert restored.turns == transcript.turns
    assert Transcript.restore(None).turns == ()
