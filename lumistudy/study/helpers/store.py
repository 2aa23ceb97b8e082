"""Load and save the ``StudyState`` held in the browser's Django session."""
from lumistudy.study.helpers.state import StudyState, initial_state

_SESSION_KEY = "study_state"


def load_state(request) -> StudyState:
    data = request.session.get(_SESSION_KEY)
    if data is None:
        return initial_state()
    return StudyState.from_dict(data)


def save_state(request, state: StudyState) -> None:
    request.session[_SESSION_KEY] = state.as_dict()


def clear_state(request) -> None:
    request.session.pop(_SESSION_KEY, None)
