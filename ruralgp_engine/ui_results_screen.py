import streamlit as st
import plotly.graph_objects as go
from ruralgp_engine.incentive_definitions import INCENTIVE_PROGRAMS
from ruralgp_engine.utils import (
    YEAR_COLUMNS,
    format_currency,
    build_results_dataframe,
    build_reference_tables,
)


def display_results(results: dict, eligible_programs: list):
    """
    Shows totals, the per-year breakdown, a chart and the reference rate tables.
    `eligible_programs` lists the programs whose eligibility criteria the applicant meets.
    """
    st.subheader("💰 Your Estimated Incentives")

    metric_col1, metric_col2 = st.columns(2)
    metric_col1.metric("Total over 6 years", format_currency(results["grand_total"]))
    metric_col2.metric("Eligible payment categories", f"{results['eligible_category_count']} of {len(INCENTIVE_PROGRAMS)}")

    if results["grand_total"] == 0:
        st.info("No payments apply to the answers so far. Add your HELP balance, professional status and practice areas to see more.", icon="💡")

    if eligible_programs:
        st.markdown("**Criteria met for:** " + ", ".join(program["short_name"] for program in eligible_programs))

    df = build_results_dataframe(results)
    st.dataframe(
        df.style.format(lambda amount: format_currency(amount, gray_out_zero=True)),
        use_container_width=True,
    )
    st.caption("Amounts are rounded to the nearest dollar for display.")

    # --- Stacked yearly chart ---
    fig = go.Figure()
    for program in INCENTIVE_PROGRAMS:
        schedule = results["schedules"][program["id"]]
        if any(amount > 0 for amount in schedule):
            fig.add_trace(go.Bar(x=YEAR_COLUMNS, y=schedule, name=program["short_name"]))
    fig.update_layout(
        barmode="stack",
        yaxis_title="Amount ($)",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    st.plotly_chart(fig, use_container_width=True)

    # --- Program details & reference tables ---
    with st.expander("📖 How each payment is calculated"):
        eligible_ids = {program["id"] for program in eligible_programs}
        for program in INCENTIVE_PROGRAMS:
            marker = "✅" if program["id"] in eligible_ids else "▫️"
            st.markdown(f"{marker} **{program['name']}:** {program['range_tooltip']}  \n*Formula:* `{program['formula_text']}`")

    reference_tables = build_reference_tables()
    tabs = st.tabs(list(reference_tables.keys()))
    for tab, (title, table) in zip(tabs, reference_tables.items()):
        with tab:
            st.markdown(f"**{title}**")
            st.dataframe(table, use_container_width=True)
