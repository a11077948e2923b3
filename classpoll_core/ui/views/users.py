from __future__ import annotations
import pandas as pd
import streamlit as st

from classpoll_core.config import DEFAULT_RESET_PASSWORD
from classpoll_core.data.models import User, UserRole, copy_entity
from classpoll_core.ui.components import confirm_button, header

ROLES = list(UserRole)


def users_frame(users) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Nom": u.name, "Email": u.email, "Rôle": u.role.label, "Classe": u.class_group or "-"}
         for u in sorted(users, key=lambda u: u.name.lower())],
        columns=["Nom", "Email", "Rôle", "Classe"],
    )


def render(controller) -> None:
    state = controller.state
    header("Utilisateurs", "Comptes, rôles et classes", "👥")

    role_counts = {role: sum(1 for u in state.users if u.role == role) for role in ROLES}
    cols = st.columns(len(ROLES))
    for col, role in zip(cols, ROLES):
        col.metric(role.label, role_counts[role])

    with st.expander("➕ Nouvel utilisateur"):
        with st.form("new_user", clear_on_submit=True):
            values = _user_fields(controller)
            password = st.text_input("Mot de passe", value=DEFAULT_RESET_PASSWORD, type="password")
            if st.form_submit_button("Créer", type="primary"):
                if not values["name"] or not values["email"]:
                    st.warning("Le nom et l'email sont obligatoires.")
                elif controller.engine.add_user(password=password, **values):
                    st.rerun()

    st.dataframe(users_frame(state.users), use_container_width=True, hide_index=True)

    for user in sorted(state.users, key=lambda u: u.name.lower()):
        _render_manage(controller, user)


def _user_fields(controller, user: User = None, key: str = "new"):
    class_names = [""] + [g.name for g in controller.state.class_groups]
    if user and user.class_group and user.class_group not in class_names:
        class_names.append(user.class_group)
    name = st.text_input("Nom complet", value=user.name if user else "", key=f"{key}-name")
    email = st.text_input("Email", value=user.email if user else "", key=f"{key}-email")
    c1, c2 = st.columns(2)
    role = c1.selectbox("Rôle", ROLES, format_func=lambda r: r.label,
                        index=ROLES.index(user.role) if user else ROLES.index(UserRole.ELEVE),
                        key=f"{key}-role")
    class_group = c2.selectbox("Classe", class_names, format_func=lambda c: c or "Aucune",
                               index=class_names.index(user.class_group or "") if user else 0,
                               key=f"{key}-class")
    return {
        "name": name.strip(),
        "email": email.strip(),
        "role": role,
        "class_group": class_group or None,
    }


def _render_manage(controller, user: User) -> None:
    current = controller.current_user
    with st.expander(f"{user.name} · {user.role.label}"):
        with st.form(f"edit-{user.id}"):
            values = _user_fields(controller, user, key=user.id)
            new_password = st.text_input("Nouveau mot de passe (laisser vide pour conserver)",
                                         type="password", key=f"{user.id}-password")
            if st.form_submit_button("Enregistrer"):
                result = controller.engine.update_user(copy_entity(user, password=new_password, **values))
                if result:
                    if current.id == user.id:
                        controller.auth.refresh_session()
                    st.rerun()

        if st.button("🔑 Réinitialiser le mot de passe", key=f"reset-{user.id}"):
            controller.engine.reset_user_password(user.id)
            st.rerun()

        # An admin cannot delete their own account from here
        if user.id != current.id:
            if confirm_button("🗑️ Supprimer", key=f"del-user-{user.id}",
                              prompt="Supprimer cet utilisateur et tout son contenu ?"):
                controller.engine.delete_user(user.id)
                st.rerun()
