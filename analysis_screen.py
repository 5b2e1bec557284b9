"""
ANALYSIS SCREEN - TM leverage review
Lets a reviewer run TM suggestions for a batch of segments and accept matches

Workflow:
  1. Paste source segments (one per line)
  2. Click "Find TM Matches"
  3. See leverage, projected savings and match distribution
  4. Review ranked matches per segment
  5. Accept a match (counts a reuse) or save a new translation to the TM
"""

import streamlit as st
import pandas as pd

from services.tm_matcher import TMatcher
from utils.logger import SuggestionLogger
from utils.text_processor import split_segments


MATCH_TYPE_ORDER = ['exact', 'fuzzy', 'context', 'terminology', 'no_match', 'error']


def _get_processing_type(level):
    """Get processing type for match type"""
    if level == 'exact':
        return "⚡ Reuse"
    elif level in ['fuzzy', 'context']:
        return "📝 Review"
    elif level == 'error':
        return "⚠️ Lookup failed"
    else:
        return "✍️ Translate"


def build_distribution_table(analysis) -> pd.DataFrame:
    """Match type distribution as a display table"""
    rows = []
    for level in MATCH_TYPE_ORDER:
        if level in analysis.by_type:
            data = analysis.by_type[level]
            pct = (data['words'] / analysis.total_words * 100) if analysis.total_words > 0 else 0
            rows.append({
                'Match Type': level,
                'Segments': data['segments'],
                'Words': data['words'],
                'Percentage': f"{pct:.1f}%",
                'Processing': _get_processing_type(level)
            })
    return pd.DataFrame(rows)


def build_matches_table(suggestion) -> pd.DataFrame:
    """Ranked matches for one segment as a display table"""
    return pd.DataFrame([
        {
            'Score': m.match_score,
            'Type': m.match_type,
            'Boost': m.context_boost,
            'Quality': m.quality_score,
            'Rank': round(m.blended_score, 1),
            'TM Source': m.source_text,
            'TM Target': m.target_text,
            'Used': m.usage_count,
        }
        for m in suggestion.matches
    ])


def render_analysis_screen(matcher: TMatcher):
    """Render the TM leverage review screen"""

    st.markdown("## 📋 TM Leverage Review")
    st.markdown("---")

    if 'analysis' not in st.session_state:
        st.session_state.analysis = None
    if 'run_log' not in st.session_state:
        st.session_state.run_log = ""

    # Step 1: Segments
    st.markdown("### Step 1️⃣: Source Segments")
    source_text = st.text_area(
        "One segment per line",
        height=200,
        key="analysis_source_text"
    )
    segment_type = st.text_input("Segment type (optional)", key="analysis_segment_type")

    # Step 2: Lookup
    if st.button("🔍 Find TM Matches", type="primary", use_container_width=True,
                 disabled=not source_text.strip()):
        segments = split_segments(source_text)
        if segment_type:
            for seg in segments:
                seg['type'] = segment_type

        run_logger = SuggestionLogger()
        matcher.run_logger = run_logger
        with st.spinner("📊 Matching segments..."):
            analysis = matcher.analyze_segments(segments)

        st.session_state.analysis = analysis
        st.session_state.run_log = run_logger.get_content()

        if matcher.error:
            st.toast(f"TM Suggestions Failed: {matcher.error}", icon="⚠️")

    analysis = st.session_state.analysis
    if analysis is None:
        st.info("👆 Paste segments and click **Find TM Matches** to see leverage and savings")
        return

    # Step 3: Summary
    st.markdown("### Step 2️⃣: Results")
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("📊 Segments", analysis.total_segments)
    with col2:
        st.metric("📝 Words", analysis.total_words)
    with col3:
        st.metric("🎯 Leverage", f"{analysis.leverage_rate:.1f}%")
    with col4:
        st.metric("💰 Est. Savings", f"${analysis.total_cost_savings:.2f}")

    st.dataframe(build_distribution_table(analysis), use_container_width=True, hide_index=True)

    # Step 4: Per-segment review
    st.markdown("### Step 3️⃣: Review Matches")
    for suggestion in analysis.suggestions:
        label = f"{suggestion.segment_id} | {suggestion.leverage_score}%"
        with st.expander(label):
            st.markdown(f"**Source:** {suggestion.source_text}")
            if suggestion.error:
                st.error(f"Lookup failed: {suggestion.error}")
                continue

            for reason in suggestion.reasoning:
                st.caption(f"• {reason}")

            if suggestion.matches:
                st.dataframe(build_matches_table(suggestion), use_container_width=True, hide_index=True)
                if st.button("✅ Accept best match", key=f"accept_{suggestion.segment_id}"):
                    if matcher.record_usage(suggestion.best_match.entry.id):
                        st.success("Match accepted")
                    else:
                        st.toast("Could not update TM usage", icon="⚠️")

            new_target = st.text_input("Final translation", key=f"target_{suggestion.segment_id}")
            if st.button("💾 Save to TM", key=f"save_{suggestion.segment_id}", disabled=not new_target):
                if matcher.save_tm(suggestion.segment_id, suggestion.source_text, new_target):
                    st.success("Saved to translation memory")
                else:
                    st.toast("Could not save to TM", icon="⚠️")

    with st.expander("📜 Run log"):
        st.code(st.session_state.run_log or "(empty)")


def render_analytics(matcher: TMatcher):
    """Project-level TM analytics panel"""
    st.markdown("## 📈 Project TM Analytics")
    analytics = matcher.get_analytics()
    if analytics is None:
        st.warning("Analytics unavailable - TM store could not be reached")
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Entries", analytics.total_entries)
        st.metric("Exact", analytics.exact_matches)
    with col2:
        st.metric("Fuzzy", analytics.fuzzy_matches)
        st.metric("Leverage", f"{analytics.leverage_rate:.1f}%")
    with col3:
        st.metric("Avg Quality", f"{analytics.avg_quality:.1f}")
        st.metric("Avg Confidence", f"{analytics.avg_confidence:.1f}")
