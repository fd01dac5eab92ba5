"""
Mega Millions Lotto Analyzer -- Streamlit Web Application

Dashboard over the analysis engines: frequency, pairs, hot streaks,
gap/due ratios, even/odd, high/low, sums, and the lucky number generator.
The draw selection lives in the session so toggling draws only recomputes
the tables once.
"""
import os
import sys

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from lotto_analyzer import analysis
from lotto_analyzer.draws import date_string, even_odd_ratio, low_high_ratio, parse_text
from lotto_analyzer.fetcher import load_data
from lotto_analyzer.selection import AnalysisService, DrawSelection

# -- Page Config ----------------------------------------------------------

st.set_page_config(
    page_title="Lotto Analyzer",
    page_icon="🎱",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .number-ball {
        display: inline-block;
        width: 48px;
        height: 48px;
        border-radius: 50%;
        text-align: center;
        line-height: 48px;
        font-size: 1.2rem;
        font-weight: 700;
        margin: 4px;
        color: white;
    }
    .ball-main { background: linear-gradient(135deg, #3498DB, #2C3E50); }
    .ball-bonus { background: linear-gradient(135deg, #F39C12, #E67E22); }
</style>
""", unsafe_allow_html=True)

DUE_COLORS = {
    "under-due": "#3498DB",
    "approaching": "#2ECC71",
    "mildly overdue": "#F1C40F",
    "notably overdue": "#E67E22",
    "very overdue": "#E74C3C",
}

TIME_RANGE_LABELS = {
    "7 Days": "7d",
    "30 Days": "30d",
    "90 Days": "90d",
    "1 Year": "1y",
    "All Time": "all",
}


def balls(numbers, bonus=None):
    html = "".join(f'<span class="number-ball ball-main">{n}</span>' for n in numbers)
    if bonus is not None:
        html += f'<span class="number-ball ball-bonus">{bonus}</span>'
    st.markdown(html, unsafe_allow_html=True)


def frequency_chart(freqs, title, color):
    if not freqs:
        st.info("No draws selected.")
        return
    freq_df = pd.DataFrame(freqs, columns=["Number", "Count"])
    fig = px.bar(freq_df.head(30), x="Number", y="Count", title=title)
    fig.update_traces(marker_color=color)
    fig.update_layout(xaxis_type="category", template="plotly_dark")
    st.plotly_chart(fig, use_container_width=True)


# -- Session State --------------------------------------------------------

@st.cache_data(ttl=3600)
def get_data():
    return load_data()


if "service" not in st.session_state:
    st.session_state.service = AnalysisService(DrawSelection(get_data()))

service = st.session_state.service
selection = service.selection


# -- Sidebar --------------------------------------------------------------

st.sidebar.markdown("## Lotto Analyzer")

page = st.sidebar.radio(
    "Navigate",
    ["Dashboard", "Number Frequency", "Least Common", "Bonus Frequency",
     "Number Pairs", "Hot Streaks", "Gap / Due", "Heatmap", "Even/Odd", "High/Low",
     "Number Sum", "Lucky Numbers", "Data"],
)

st.sidebar.markdown("---")
st.sidebar.markdown(
    f"**Selected:** {len(selection.selected)} of {len(selection.draws)} draws"
)
st.sidebar.markdown(
    "**Disclaimer:** For entertainment only. Lottery draws are random and "
    "no statistic here predicts future results."
)

selected_df = selection.selected_draws()


# ==========================================================================
# DASHBOARD
# ==========================================================================

if page == "Dashboard":
    st.title("Mega Millions Statistics")

    stats_map = service.statistics()
    cols = st.columns(4)
    for col, label in zip(cols, ["Total Draws", "Avg Sum", "Avg Even", "Avg High"]):
        col.metric(label, stats_map.get(label, "-"))

    hl = analysis.dashboard_highlights(selection.draws)
    c1, c2, c3, c4 = st.columns(4)
    if hl["most_frequent"]:
        n, cnt = hl["most_frequent"]
        c1.metric("Most Frequent", n, f"{cnt} times")
    if hl["most_frequent_bonus"]:
        n, cnt = hl["most_frequent_bonus"]
        c2.metric("Top Bonus", n, f"{cnt} times")
    if hl["hot_number"]:
        n, cnt = hl["hot_number"]
        c3.metric("Hot Number (last 10)", n, f"{cnt} times")
    if hl["top_pair"]:
        a, b = hl["top_pair"]["pair"]
        c4.metric("Lucky Pair", f"{a}-{b}", f"{hl['top_pair']['count']} times")

    st.subheader("Latest Draws")
    for _, row in selection.draws.head(5).iterrows():
        st.markdown(f"**{date_string(row['date'])}** &nbsp; {row['original_string']}")

elif page == "Number Frequency":
    st.header("Number Frequency")
    frequency_chart(service.frequency(), "Most frequent main numbers", "#3498DB")

elif page == "Least Common":
    st.header("Least Common")
    frequency_chart(service.least_common(), "Least frequent main numbers", "#9B59B6")

elif page == "Bonus Frequency":
    st.header("Bonus Ball Frequency")
    frequency_chart(service.bonus_frequency(), "Most frequent bonus balls", "#F39C12")

elif page == "Number Pairs":
    st.header("Number Pairs")
    pairs = service.pairs()
    if pairs:
        pair_df = pd.DataFrame([
            {"Pair": f"{p['pair'][0]}-{p['pair'][1]}", "Count": p["count"],
             "Last Seen": date_string(p["last_date"])}
            for p in analysis.top_pairs(pairs, 30)
        ])
        st.dataframe(pair_df, use_container_width=True, hide_index=True)

        number = st.number_input("Pairs containing number", 1, 70, 1)
        containing = analysis.pairs_containing(int(number), pairs)[:15]
        st.write(", ".join(f"{p['pair'][0]}-{p['pair'][1]} ({p['count']})" for p in containing))
    else:
        st.info("No draws selected.")

elif page == "Hot Streaks":
    st.header("Hot Streaks (last 20 selected draws)")
    for entry in service.hot_streaks()[:20]:
        st.markdown(
            f"**{entry['number']}** -- {entry['streak']} times: "
            f"{', '.join(entry['appearances'])}"
        )

elif page == "Gap / Due":
    st.header("Gap / Due Number Analysis")
    st.caption(
        "Due ratio = draws since last seen / average gap. Above 1.0 means a "
        "longer absence than usual -- not a guarantee."
    )
    gaps = service.gaps()
    if gaps:
        top = analysis.most_overdue(gaps)
        if top:
            st.subheader("Most Overdue")
            cols = st.columns(len(top))
            for col, e in zip(cols, top):
                col.metric(str(e["number"]), f"{e['due_ratio']:.1f}x", e["band"])

        view = st.radio("Filter", ["All", "Overdue", "Very Overdue"], horizontal=True)
        if view == "Overdue":
            gaps = analysis.overdue_entries(gaps)
        elif view == "Very Overdue":
            gaps = analysis.very_overdue_entries(gaps)

        gap_df = pd.DataFrame(gaps)
        if len(gap_df):
            fig = go.Figure(go.Bar(
                x=gap_df["number"].astype(str),
                y=gap_df["due_ratio"].clip(upper=3.0),
                marker_color=[DUE_COLORS[b] for b in gap_df["band"]],
            ))
            fig.update_layout(template="plotly_dark", xaxis_title="Number",
                              yaxis_title="Due ratio (capped at 3)")
            st.plotly_chart(fig, use_container_width=True)
            st.dataframe(
                gap_df[["number", "appearances", "avg_gap", "current_gap",
                        "due_ratio", "last_seen", "band"]],
                use_container_width=True, hide_index=True,
            )
    else:
        st.info("No draws selected.")

elif page == "Heatmap":
    st.header("Number Heatmap")
    c1, c2 = st.columns(2)
    kind = c1.radio("Numbers", ["Main (1-70)", "Bonus (1-25)"], horizontal=True)
    range_label = c2.selectbox("Time range", list(TIME_RANGE_LABELS), index=1)
    is_bonus = kind.startswith("Bonus")
    time_range = TIME_RANGE_LABELS[range_label]

    window = analysis.filter_time_range(selected_df, time_range)
    st.caption(f"{len(window)} selected draws in range")
    grid = analysis.frequency_grid(window, bonus=is_bonus)
    width = len(grid[0])
    labels = [[str(r * width + c + 1) for c in range(width)] for r in range(len(grid))]
    fig = px.imshow(grid, color_continuous_scale="YlOrRd", aspect="auto",
                    labels={"color": "Count"})
    fig.update_traces(text=labels, texttemplate="%{text}")
    fig.update_xaxes(showticklabels=False)
    fig.update_yaxes(showticklabels=False)
    fig.update_layout(template="plotly_dark")
    st.plotly_chart(fig, use_container_width=True)

    number = st.number_input("Number detail", 1, 25 if is_bonus else 70, 1)
    detail = analysis.number_detail(selected_df, int(number), bonus=is_bonus,
                                    time_range=time_range)
    d1, d2, d3 = st.columns(3)
    d1.metric("Frequency", detail["frequency"])
    d2.metric("Last Seen", detail["last_seen"])
    d3.metric("Avg Gap", f"{detail['avg_gap']} draws" if detail["avg_gap"] else "-")
    if detail["recent_appearances"]:
        st.write("Recent: " + ", ".join(detail["recent_appearances"]))

elif page == "Even/Odd":
    st.header("Even / Odd Distribution")
    eo = analysis.even_odd_distribution(selected_df)
    c1, c2 = st.columns(2)
    c1.metric("Avg Even", eo["avg_even"])
    c2.metric("Avg Odd", eo["avg_odd"])
    st.dataframe(eo["dataframe"], use_container_width=True, hide_index=True)
    st.dataframe(pd.DataFrame({
        "Date": [date_string(d) for d in selected_df["date"]],
        "Even:Odd": [even_odd_ratio(r) for _, r in selected_df.iterrows()],
    }), use_container_width=True, hide_index=True)

elif page == "High/Low":
    st.header("High / Low Distribution (high = 36-70)")
    hl = analysis.high_low_distribution(selected_df)
    c1, c2 = st.columns(2)
    c1.metric("Avg High", hl["avg_high"])
    c2.metric("Avg Low", hl["avg_low"])
    st.dataframe(hl["dataframe"], use_container_width=True, hide_index=True)
    st.dataframe(pd.DataFrame({
        "Date": [date_string(d) for d in selected_df["date"]],
        "Low:High": [low_high_ratio(r) for _, r in selected_df.iterrows()],
    }), use_container_width=True, hide_index=True)

elif page == "Number Sum":
    st.header("Number Sum Analysis")
    sa = analysis.sum_analysis(selected_df)
    if sa["stats"]:
        c1, c2, c3 = st.columns(3)
        c1.metric("Avg", f"{sa['stats']['mean']:.0f}")
        c2.metric("Min", sa["stats"]["min"])
        c3.metric("Max", sa["stats"]["max"])
        fig = px.histogram(sa["sums"], nbins=30, title="Main number sums")
        fig.update_layout(template="plotly_dark", showlegend=False)
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No draws selected.")

elif page == "Lucky Numbers":
    st.header("Lucky Number Generator")
    st.caption("Blends recency, overdue, pair and mid-frequency signals. Not a prediction.")
    if st.button("Generate"):
        pick = service.lucky_numbers()
        if pick["available"]:
            balls(pick["numbers"], pick["bonus_number"])
            st.json(pick["slots"])
        else:
            st.warning(f"Cannot generate: {pick['reason']}")

elif page == "Data":
    st.header("Draw Data")
    c1, c2, c3 = st.columns(3)
    if c1.button("Select All"):
        selection.select_all()
        st.rerun()
    if c2.button("Deselect All"):
        selection.deselect_all()
        st.rerun()
    if c3.button("Refresh From Source"):
        get_data.clear()
        selection.replace_draws(load_data(refresh=True))
        st.rerun()

    pasted = st.text_area("Paste draws (M/D/YYYY, n n n n n + b)")
    if st.button("Load Pasted Data") and pasted.strip():
        new_draws = parse_text(pasted)
        if len(new_draws):
            selection.replace_draws(new_draws)
            st.rerun()
        else:
            st.error("No valid lottery data found")

    for _, row in selection.draws.head(100).iterrows():
        draw_id = row["draw_id"]
        # widget state mirrors the selection
        st.session_state[f"sel_{draw_id}"] = selection.is_selected(draw_id)
        st.checkbox(
            f"{date_string(row['date'])}  {row['original_string']}",
            key=f"sel_{draw_id}",
            on_change=selection.toggle,
            args=(draw_id,),
        )
