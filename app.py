import logging

import streamlit as st

from services.tm_store import InMemoryTMStore
from services.supabase_client import SupabaseTMStore
from services.tm_matcher import TMatcher
from utils.tm_import import load_tmx, load_csv
from analysis_screen import render_analysis_screen, render_analytics
import config

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# --- Setup ---
st.set_page_config(page_title=config.APP_NAME, layout=config.LAYOUT, page_icon="🌍")

# Session state initialization
if 'local_store' not in st.session_state:
    st.session_state.local_store = InMemoryTMStore()
if 'supabase_store' not in st.session_state:
    st.session_state.supabase_store = None
if 'loaded_tm_files' not in st.session_state:
    st.session_state.loaded_tm_files = set()

# --- Sidebar ---
with st.sidebar:
    st.title("⚙️ Configuration")

    # Language Settings
    st.subheader("🌐 Languages")
    lang_keys = list(config.SUPPORTED_LANGUAGES.keys())
    src_code = st.selectbox(
        "Source Language",
        lang_keys,
        index=lang_keys.index(config.DEFAULT_SOURCE_LANGUAGE),
        format_func=lambda x: f"{config.SUPPORTED_LANGUAGES[x]} ({x})"
    )
    tgt_code = st.selectbox(
        "Target Language",
        lang_keys,
        index=lang_keys.index(config.DEFAULT_TARGET_LANGUAGE),
        format_func=lambda x: f"{config.SUPPORTED_LANGUAGES[x]} ({x})"
    )

    area = st.selectbox("Therapeutic Area", ["(any)"] + config.THERAPEUTIC_AREAS)
    therapeutic_area = None if area == "(any)" else area
    project_id = st.text_input("Project ID", value="") or None

    st.divider()

    # TM Source
    st.subheader("📚 Translation Memory")
    source_choice = st.radio("TM source", ["Local files", "Supabase"], horizontal=True)

    if source_choice == "Supabase":
        settings = config.load_supabase_settings()
        if not settings['url'] or not settings['api_key']:
            st.warning("Set SUPABASE_URL and SUPABASE_KEY to use the shared TM")
        elif st.session_state.supabase_store is None:
            store = SupabaseTMStore.from_settings(settings)
            if store.test_connection():
                st.session_state.supabase_store = store
            else:
                st.error("✗ Could not reach the TM table")
        if st.session_state.supabase_store is not None:
            st.success("✓ Connected")
        store = st.session_state.supabase_store
    else:
        tm_file = st.file_uploader("Upload TM (TMX or CSV)", type=['tmx', 'csv'])
        if tm_file is not None and tm_file.name not in st.session_state.loaded_tm_files:
            content = tm_file.getvalue()
            loader = load_csv if tm_file.name.lower().endswith('.csv') else load_tmx
            entries = loader(content, src_code, tgt_code,
                             therapeutic_area=therapeutic_area, project_id=project_id)
            st.session_state.local_store.add_entries(entries)
            st.session_state.loaded_tm_files.add(tm_file.name)
            st.success(f"✓ Loaded {len(entries)} TM entries")
        store = st.session_state.local_store
        st.caption(f"{len(store)} entries in memory")

# --- Main ---
st.title(f"🌍 {config.APP_NAME}")

if store is None:
    st.info("👈 Connect a TM source to start")
else:
    matcher = TMatcher(
        store,
        source_language=src_code,
        target_language=tgt_code,
        therapeutic_area=therapeutic_area,
        project_id=project_id
    )

    review_tab, analytics_tab = st.tabs(["📋 Review", "📈 Analytics"])
    with review_tab:
        render_analysis_screen(matcher)
    with analytics_tab:
        render_analytics(matcher)
