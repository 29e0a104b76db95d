"""
learnpath - Course learn page

Streamlit application where an enrolled learner works through a course:
lessons in curriculum order, watch-position resume, lesson completion and
timed assessments with review.

Usage:
    streamlit run app.py -- (or open with ?courseId=<id>&userId=<id>)
"""

import streamlit as st
import streamlit.components.v1 as components

from learnpath.classroom import (
    ApiClient,
    AttemptState,
    CourseLearnSession,
    LessonMark,
)
from learnpath.config import get_settings
from learnpath.schemas import ContentType, QuestionType
from learnpath.utils import configure_logging
from learnpath.viewer import (
    get_lesson_css,
    get_quiz_css,
    module_label,
    render_article,
    render_lesson_header,
    render_progress_summary,
    render_question,
    render_review,
    render_score,
    render_start_dialog,
    render_timer,
    render_video_placeholder,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

settings = get_settings()
logger = configure_logging(settings.log_level)

st.set_page_config(
    page_title="learnpath",
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Create the learn session for the requested course once per browser session."""
    course_id = st.query_params.get("courseId")
    user_id = st.query_params.get("userId") or settings.user_id

    session = st.session_state.get("learn")
    if session is not None and session.course_id == course_id and session.user_id == user_id:
        return

    if session is not None:
        session.close()
        st.session_state.learn = None

    if not course_id:
        return

    client = ApiClient.from_settings(settings)
    session = CourseLearnSession(client, course_id, user_id=user_id, settings=settings)
    session.open()
    st.session_state.learn = session


def get_session() -> CourseLearnSession:
    return st.session_state.learn


# -----------------------------------------------------------------------------
# Sidebar: Curriculum Tree
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render the sidebar with course progress and the module tree."""
    session = get_session()
    st.sidebar.title(f"🎓 {session.course_title}")

    summary = session.tracker.summary()
    st.sidebar.markdown(get_lesson_css(), unsafe_allow_html=True)
    st.sidebar.markdown(render_progress_summary(summary), unsafe_allow_html=True)
    st.sidebar.progress(min(summary["overall_progress"], 100) / 100)

    if session.tracker.error:
        st.sidebar.warning(session.tracker.error)

    st.sidebar.divider()
    st.sidebar.subheader("Curriculum")

    nav = session.navigator
    for nav_module in nav.get_navigation_tree():
        with st.sidebar.expander(module_label(nav_module), expanded=nav_module.expanded):
            for nav_lesson in nav_module.lessons:
                lesson = nav_lesson.lesson
                indicator = nav.get_status_indicator(lesson.id)

                if nav_lesson.mark == LessonMark.COMPLETED:
                    style = "color: #388E3C;"
                elif nav_lesson.is_current:
                    style = "color: #1976D2; font-weight: bold;"
                else:
                    style = ""

                col1, col2 = st.columns([1, 9])
                with col1:
                    st.markdown(f"<span style='{style}'>{indicator}</span>", unsafe_allow_html=True)
                with col2:
                    if st.button(
                        lesson.title[:30] + "..." if len(lesson.title) > 30 else lesson.title,
                        key=f"lesson_{lesson.id}",
                        use_container_width=True,
                    ):
                        select_lesson(lesson.id)

            assessment = nav_module.module.module_assessment
            if assessment and st.button(f"📝 {assessment.title}", key=f"module_assessment_{assessment.id}"):
                open_assessment(assessment)

    curriculum = session.loader.curriculum
    if curriculum and curriculum.final_assessment:
        st.sidebar.divider()
        final = curriculum.final_assessment
        if st.sidebar.button(f"🏁 {final.title}", key=f"final_{final.id}", use_container_width=True):
            open_assessment(final)


def select_lesson(lesson_id: str):
    get_session().select_lesson(lesson_id)
    st.rerun()


def open_assessment(assessment):
    get_session().start_assessment(assessment)
    st.rerun()


# -----------------------------------------------------------------------------
# Main Content: Lesson View
# -----------------------------------------------------------------------------

def render_lesson_view():
    """Render the selected lesson."""
    session = get_session()
    view = session.lesson_view()
    if view is None:
        st.info("This course has no lessons yet.")
        return

    nav = session.navigator
    module = session.loader.module_of(view.lesson.id)

    render_navigation_bar()

    st.markdown(get_lesson_css(), unsafe_allow_html=True)
    st.markdown(
        render_lesson_header(view, module.title if module else None, nav.get_lesson_position()),
        unsafe_allow_html=True,
    )

    if view.content_type == ContentType.VIDEO:
        render_video(view)
    elif view.content_type == ContentType.ARTICLE:
        st.markdown(render_article(view), unsafe_allow_html=True)
    elif view.lesson.description:
        st.markdown(view.lesson.description)

    if view.quiz:
        st.divider()
        st.subheader(view.quiz.title)
        if st.button("Start quiz", key=f"quiz_{view.quiz.id}", type="primary"):
            open_assessment(view.quiz)

    render_completion_section(view)


def render_video(view):
    session = get_session()
    if not view.video_url:
        st.markdown(render_video_placeholder(view), unsafe_allow_html=True)
        return

    st.video(view.video_url, start_time=session.player_position)

    max_position = view.duration or max(session.player_position, 1) * 2
    position = st.slider(
        "Watched up to (seconds)",
        min_value=0,
        max_value=int(max_position),
        value=min(session.player_position, int(max_position)),
        key=f"position_{view.lesson.id}",
    )
    if position != session.player_position:
        session.player_position = position
        session.player.on_progress(view.lesson.id, position)

    if st.button("Finished watching", key=f"ended_{view.lesson.id}", disabled=view.is_completed):
        session.player.on_ended(view.lesson.id)
        st.rerun()


def render_navigation_bar():
    """Render navigation bar with prev/next buttons."""
    session = get_session()
    nav = session.navigator
    pos, total = nav.get_lesson_position()

    col1, col2, col3 = st.columns([1, 2, 1])

    with col1:
        if nav.get_previous_lesson_id():
            if st.button("← Previous", use_container_width=True):
                session.previous_lesson()
                st.rerun()

    with col2:
        st.markdown(f"<center>Lesson {pos} of {total}</center>", unsafe_allow_html=True)

    with col3:
        if nav.get_next_lesson_id():
            if st.button("Next →", use_container_width=True):
                session.next_lesson()
                st.rerun()

    st.divider()


def render_completion_section(view):
    """Render lesson completion section."""
    session = get_session()
    st.divider()

    if view.is_completed:
        st.success("Lesson completed!")
        return

    if st.button(
        "Mark lesson as complete",
        type="primary",
        use_container_width=True,
        disabled=not view.can_mark_complete,
    ):
        session.player.mark_complete(view.lesson.id)
        st.rerun()


# -----------------------------------------------------------------------------
# Assessment View
# -----------------------------------------------------------------------------

def render_assessment_view():
    """Render the attempt controller's current state."""
    controller = get_session().controller
    st.markdown(get_quiz_css(), unsafe_allow_html=True)

    if controller.state == AttemptState.CONFIRMING:
        render_start_dialog_view()
    elif controller.state == AttemptState.IN_PROGRESS:
        render_attempt_form()
    elif controller.state == AttemptState.REVIEWING:
        render_results()


def render_start_dialog_view():
    controller = get_session().controller
    info = controller.start_dialog()
    st.markdown(render_start_dialog(info), unsafe_allow_html=True)

    col1, col2 = st.columns(2)
    with col1:
        label = "Retake assessment" if info.is_retake else "Start assessment"
        if st.button(label, type="primary", disabled=not info.can_start, use_container_width=True):
            controller.confirm_start()
            st.rerun()
    with col2:
        if st.button("Cancel", use_container_width=True):
            controller.cancel()
            st.rerun()


@st.fragment(run_every=1)
def render_timer_fragment():
    controller = get_session().controller
    if controller.state != AttemptState.IN_PROGRESS:
        # Time-up submission happened on the timer thread
        st.rerun(scope="app")
    st.markdown(render_timer(controller.timer), unsafe_allow_html=True)


def render_attempt_form():
    controller = get_session().controller
    assessment = controller.assessment

    st.subheader(assessment.title)
    if controller.timer is not None:
        col1, col2 = st.columns([3, 1])
        with col1:
            render_timer_fragment()
        with col2:
            label = "Resume timer" if controller.timer.paused else "Pause timer"
            if st.button(label, use_container_width=True):
                controller.timer.toggle_pause()
                st.rerun()

    stats = controller.assessment_progress()
    st.progress(stats["percentage"] / 100, text=f"{stats['answered']} of {stats['total']} answered")

    for idx, question in enumerate(assessment.questions):
        st.markdown(render_question(question, idx), unsafe_allow_html=True)
        key = f"answer_{controller.attempt.id}_{question.id}"
        current = controller.answers.get(question.id)

        if question.question_type in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE):
            choices = question.choices
            value = st.radio(
                "Answer",
                choices,
                index=choices.index(current) if current in choices else None,
                key=key,
                label_visibility="collapsed",
            )
        elif question.question_type == QuestionType.SHORT_ANSWER:
            value = st.text_input("Answer", value=current or "", key=key, label_visibility="collapsed")
        else:
            value = st.text_area("Answer", value=current or "", key=key, label_visibility="collapsed")

        if value is not None and value != current:
            controller.set_answer(question.id, value)

    if controller.error:
        st.error(controller.error)

    if st.button("Submit", type="primary", disabled=not controller.can_submit(), use_container_width=True):
        controller.submit()
        st.rerun()


def render_results():
    session = get_session()
    controller = session.controller
    result = controller.result

    st.subheader(f"{controller.assessment.title} - Results")
    st.markdown(render_score(result), unsafe_allow_html=True)
    st.markdown(render_review(result, controller.assessment), unsafe_allow_html=True)

    col1, col2 = st.columns(2)
    with col1:
        if controller.can_retake() and st.button("Retake", use_container_width=True):
            controller.retake()
            st.rerun()
    with col2:
        if st.button("Continue", type="primary", use_container_width=True):
            session.after_assessment()
            st.rerun()


# -----------------------------------------------------------------------------
# Error View
# -----------------------------------------------------------------------------

def render_error_view():
    session = get_session()
    st.error(session.error)
    col_retry, col_back = st.columns(2)
    with col_retry:
        if st.button("Retry", type="primary", use_container_width=True):
            session.retry()
            st.rerun()
    with col_back:
        if st.button("Back", use_container_width=True):
            leave_course()
            st.rerun()


def leave_course():
    """Close the learn session and drop the course from the URL."""
    session = st.session_state.get("learn")
    if session is not None:
        logger.info(f"Leaving course {session.course_id}")
        session.close()
    st.session_state.learn = None
    st.query_params.clear()


def scroll_to_top():
    # st.markdown strips scripts, so the snippet runs in a zero-height component frame
    components.html(
        "<script>window.parent.document.querySelector('section.main')?.scrollTo(0, 0);"
        "window.parent.scrollTo(0, 0);</script>",
        height=0,
    )


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()

    session = st.session_state.get("learn")
    if session is None:
        st.info("Open this page with ?courseId=<course id> to start learning.")
        return

    if session.error:
        render_error_view()
        return

    render_sidebar()

    if session.controller.state != AttemptState.IDLE:
        render_assessment_view()
    else:
        if session.controller.error:
            st.error(session.controller.error)
        render_lesson_view()

    if session.navigator.consume_scroll_request():
        scroll_to_top()


if __name__ == "__main__":
    main()
