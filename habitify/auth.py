import logging

import bcrypt
import streamlit as st

from habitify.config import ADMIN_EMAIL, BCRYPT_ROUNDS
from habitify.errors import AuthError, EmailTaken, InvalidCredentials, ValidationError

logger = logging.getLogger(__name__)


def hash_password(password, rounds=BCRYPT_ROUNDS):
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def check_password(password, stored_hash):
    try:
        return bcrypt.checkpw(password.encode(), stored_hash.encode())
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def register_user(store, email, password, name="", rounds=BCRYPT_ROUNDS):
    """
    Create an account. The configured admin email is granted admin access.
    Raises EmailTaken when the address is already registered.
    """
    email = (email or "").strip().lower()
    if not email or "@" not in email:
        raise ValidationError("A valid email is required")
    if not password:
        raise ValidationError("Password is required")

    if store.get_user_by_email(email) is not None:
        raise EmailTaken(f"Email already in use: {email}")

    is_admin = email == ADMIN_EMAIL.lower()
    user = store.create_user(email, (name or "").strip(), hash_password(password, rounds), is_admin=is_admin)
    logger.info("Registered user %s%s", user.id, " (admin)" if is_admin else "")
    return user


def login_user(store, email, password):
    """Return the User for valid credentials, else raise InvalidCredentials."""
    user = store.get_user_by_email((email or "").strip())
    if user is None or not check_password(password or "", user.password_hash):
        logger.warning("Failed login for %s", email)
        raise InvalidCredentials("Wrong email or password")
    return user


def render_login(store):
    """
    Returns the logged in user id, or None while the login form is shown.
    """
    if st.session_state.get("user_id"):
        return st.session_state["user_id"]

    _, center, _ = st.columns([1, 2, 1])
    with center:
        st.title("🔐 Welcome")
        tab_login, tab_register = st.tabs(["Login", "Register"])

        with tab_login:
            with st.form("login_form"):
                email = st.text_input("Email")
                password = st.text_input("Password", type="password")
                if st.form_submit_button("Login 🚀", use_container_width=True):
                    try:
                        user = login_user(store, email, password)
                    except AuthError as e:
                        st.error(f"😕 {e}")
                    else:
                        st.session_state["user_id"] = user.id
                        st.rerun()

        with tab_register:
            with st.form("register_form"):
                name = st.text_input("Name")
                email = st.text_input("Email", key="register_email")
                password = st.text_input("Password", type="password", key="register_password")
                if st.form_submit_button("Create Account ✨", use_container_width=True):
                    try:
                        user = register_user(store, email, password, name)
                    except (AuthError, ValidationError) as e:
                        st.error(str(e))
                    else:
                        st.session_state["user_id"] = user.id
                        st.rerun()

    return None


def logout():
    st.session_state.pop("user_id", None)
