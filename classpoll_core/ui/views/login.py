from __future__ import annotations
import streamlit as st

from classpoll_core.auth.authentication import LOGIN_FAILED_MESSAGE


def render(controller) -> None:
    settings = controller.state.settings
    _, center, _ = st.columns([1, 2, 1])
    with center:
        st.markdown(f"""
            <div style="text-align:center;margin:2rem 0 1.5rem 0;">
                <div style="font-size:3rem;">🎓</div>
                <h1 style="margin:.25rem 0 0 0;">{settings.school_name}</h1>
                <p class="cp-muted">Connectez-vous pour accéder à votre espace</p>
            </div>
        """, unsafe_allow_html=True)

        if st.session_state.get("login_view") == "FORGOT":
            _render_forgot_password()
        else:
            _render_login_form(controller)


def _render_login_form(controller) -> None:
    with st.form("login_form"):
        email = st.text_input("Email", placeholder="nom@ecole.com")
        password = st.text_input("Mot de passe", type="password")
        submitted = st.form_submit_button("Se connecter", type="primary", use_container_width=True)

    if submitted:
        if controller.auth.login(email, password):
            st.rerun()
        st.error(LOGIN_FAILED_MESSAGE)

    if st.button("Mot de passe oublié ?", key="forgot_btn"):
        st.session_state["login_view"] = "FORGOT"
        st.rerun()


def _render_forgot_password() -> None:
    # No mail is sent; accounts are reset by an administrator.
    with st.form("forgot_form"):
        email = st.text_input("Email du compte")
        submitted = st.form_submit_button("Envoyer le lien", use_container_width=True)
    if submitted and email:
        st.info(
            f"Si un compte existe pour {email}, contactez l'administration de l'école "
            "pour réinitialiser votre mot de passe."
        )
    if st.button("← Retour à la connexion", key="back_to_login"):
        st.session_state["login_view"] = "LOGIN"
        st.rerun()
