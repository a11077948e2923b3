from __future__ import annotations
from datetime import time

import pandas as pd
import streamlit as st

from classpoll_core.data.models import Exam, copy_entity
from classpoll_core.data.utils import utc_now
from classpoll_core.services.access_filter import can_manage, can_publish, target_class_choices
from classpoll_core.ui.components import (class_selectbox, combine_utc, confirm_button, header,
                                          target_label)


def exams_frame(exams) -> pd.DataFrame:
    """Date-ordered table of exams for display."""
    rows = [{
        "Date": e.date.strftime("%d/%m/%Y"),
        "Heure": e.start_time,
        "Matière": e.subject,
        "Durée (min)": e.duration_minutes,
        "Salle": e.room,
        "Classe": target_label(e.target_class),
        "Notes": e.notes or "",
    } for e in sorted(exams, key=lambda e: (e.date, e.start_time))]
    return pd.DataFrame(rows, columns=["Date", "Heure", "Matière", "Durée (min)", "Salle",
                                       "Classe", "Notes"])


def render(controller) -> None:
    user = controller.current_user
    now = utc_now()
    exams = sorted(controller.content().exams, key=lambda e: (e.date, e.start_time))
    upcoming = [e for e in exams if e.date.date() >= now.date()]
    past = [e for e in exams if e.date.date() < now.date()]

    header("Examens", "Calendrier des devoirs surveillés", "🗓️")

    if can_publish(user):
        choices = target_class_choices(user, controller.state.class_groups)
        with st.expander("➕ Nouvel examen"):
            with st.form("new_exam", clear_on_submit=True):
                values = _exam_fields(choices)
                if st.form_submit_button("Ajouter", type="primary"):
                    if not values["subject"].strip():
                        st.warning("La matière est obligatoire.")
                    elif controller.engine.add_exam(**values):
                        st.rerun()

    tab_upcoming, tab_past = st.tabs([f"À venir ({len(upcoming)})", f"Passés ({len(past)})"])
    with tab_upcoming:
        if upcoming:
            st.dataframe(exams_frame(upcoming), use_container_width=True, hide_index=True)
        else:
            st.caption("Aucun examen à venir.")
        for exam in upcoming:
            if can_manage(user, exam):
                _render_manage(controller, exam)
    with tab_past:
        if past:
            st.dataframe(exams_frame(past), use_container_width=True, hide_index=True)
        else:
            st.caption("Aucun examen passé.")


def _exam_fields(choices, exam: Exam = None, key: str = "new"):
    subject = st.text_input("Matière", value=exam.subject if exam else "", key=f"{key}-subject")
    c1, c2, c3 = st.columns(3)
    day = c1.date_input("Date", value=(exam.date if exam else utc_now()).date(), key=f"{key}-date")
    start = c2.time_input("Heure de début", value=_parse_hhmm(exam.start_time) if exam else time(8, 0),
                          key=f"{key}-start")
    duration = c3.number_input("Durée (min)", min_value=15, max_value=480, step=15,
                               value=max(exam.duration_minutes, 15) if exam else 120,
                               key=f"{key}-duration")
    room = st.text_input("Salle", value=exam.room if exam else "", key=f"{key}-room")
    notes = st.text_area("Notes", value=(exam.notes or "") if exam else "", key=f"{key}-notes")
    target_class = class_selectbox("Classe", choices, current=exam.target_class if exam else None,
                                   key=f"{key}-target")
    return {
        "subject": subject.strip(),
        "date": combine_utc(day),
        "start_time": start.strftime("%H:%M"),
        "duration_minutes": int(duration),
        "room": room.strip(),
        "notes": notes,
        "target_class": target_class,
    }


def _parse_hhmm(value: str) -> time:
    try:
        hours, minutes = value.split(":")[:2]
        return time(int(hours), int(minutes))
    except ValueError:
        return time(8, 0)


def _render_manage(controller, exam: Exam) -> None:
    with st.expander(f"✏️ {exam.subject} · {exam.date.strftime('%d/%m/%Y')}"):
        choices = target_class_choices(controller.current_user, controller.state.class_groups)
        with st.form(f"edit-{exam.id}"):
            values = _exam_fields(choices, exam, key=exam.id)
            if st.form_submit_button("Enregistrer"):
                values["notes"] = values["notes"].strip() or None
                values["target_class"] = values["target_class"] or None
                if controller.engine.update_exam(copy_entity(exam, **values)):
                    st.rerun()
        if confirm_button("🗑️ Supprimer", key=f"del-exam-{exam.id}"):
            controller.engine.delete_exam(exam.id)
            st.rerun()
