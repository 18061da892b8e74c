# src/main.py
import logging

import streamlit as st
import pandas as pd

from analysis import analyze_baskets, analyze_daily_patterns
from config import AnalysisConfig, Algorithm, DEFAULT_MIN_SUPPORT, DEFAULT_MIN_CONFIDENCE
from data_io import load_sales_csv, build_baskets, baskets_to_df, basic_stats
from errors import InvalidInput
from preprocessing.preprocess import preprocess_baskets

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)

# ---------- Streamlit App ----------
st.set_page_config(page_title="Market Basket Analysis", layout="wide")

st.title("Market Basket Analysis: Eclat vs FP-Growth")

st.markdown("""
This app lets you:
1. Upload a sales CSV (one row per invoice line)
2. Group lines into baskets and clean them
3. Run **Eclat** or **FP-Growth**, or compare both
4. Explore frequent itemsets, association rules and daily patterns
""")

# Sidebar: parameters
st.sidebar.header("Algorithm Parameters")
algorithm = st.sidebar.selectbox("Algorithm", [a.value for a in Algorithm], index=0)
min_support = st.sidebar.slider("Minimum Support", 0.001, 1.0, DEFAULT_MIN_SUPPORT, 0.001, format="%.3f")
min_confidence = st.sidebar.slider("Minimum Confidence", 0.01, 1.0, DEFAULT_MIN_CONFIDENCE, 0.01)
compare = st.sidebar.checkbox("Compare both algorithms", value=False)

tab1, tab2, tab3, tab4 = st.tabs([
    "1. Upload",
    "2. Preprocessing",
    "3. Association Mining",
    "4. Daily Patterns",
])

# ---------- TAB 1: Upload ----------
with tab1:
    st.header("Sales CSV Import")
    uploaded = st.file_uploader("Upload sales CSV", type=["csv"])
    if uploaded is not None:
        try:
            sales_df = load_sales_csv(uploaded)
            baskets, product_map = build_baskets(sales_df)
            st.session_state.baskets = baskets
            st.session_state.product_map = product_map
            st.success(f"Imported {len(baskets)} transactions from CSV.")
        except InvalidInput as e:
            st.error(f"Error reading CSV: {e}")

    baskets = st.session_state.get("baskets")
    if baskets:
        product_map = st.session_state.product_map
        st.write(basic_stats(baskets, product_map))
        st.dataframe(baskets_to_df(baskets[:100], product_map))
    else:
        st.info("No transactions loaded yet.")

# ---------- TAB 2: Preprocessing ----------
with tab2:
    st.header("Data Preprocessing")
    baskets = st.session_state.get("baskets")
    if not baskets:
        st.warning("No transactions to preprocess. Upload data in Tab 1.")
    else:
        min_items = st.number_input("Minimum items per transaction", min_value=1, max_value=10, value=1)
        if st.button("Run Preprocessing"):
            cleaned, report = preprocess_baskets(baskets, set(st.session_state.product_map), int(min_items))
            st.session_state.cleaned_baskets = cleaned
            st.session_state.preprocessing_report = report
            st.success("Preprocessing completed.")

        if "preprocessing_report" in st.session_state:
            st.subheader("Preprocessing Report")
            st.text(st.session_state.preprocessing_report)
            cleaned = st.session_state.cleaned_baskets
            st.write(basic_stats(cleaned))
            st.dataframe(baskets_to_df(cleaned[:100], st.session_state.product_map))
        else:
            st.info("Click 'Run Preprocessing' to clean the data.")

# ---------- TAB 3: Association Mining ----------
with tab3:
    st.header("Association Rule Mining")
    cleaned = st.session_state.get("cleaned_baskets")
    if not cleaned:
        st.warning("Please run preprocessing first (Tab 2).")
    else:
        if st.button("Run Analysis"):
            try:
                config = AnalysisConfig(min_support, min_confidence, algorithm, compare)
                st.session_state.analysis = analyze_baskets(cleaned, config, st.session_state.product_map)
            except InvalidInput as e:
                st.error(str(e))

        result = st.session_state.get("analysis")
        if result is not None:
            product_map = st.session_state.product_map
            if result.is_empty:
                st.warning(result.message)
            else:
                st.subheader(f"Frequent Itemsets ({result.algorithm.value})")
                st.dataframe(result.itemsets_frame(product_map))

                st.subheader("Association Rules (sorted by lift)")
                rules_df = result.rules_frame(product_map)
                if rules_df.empty:
                    st.info("No rules reach the minimum confidence. Try lowering it.")
                else:
                    st.dataframe(rules_df)

            if result.comparison:
                st.subheader("Performance Comparison")
                st.dataframe(result.comparison_frame())

            with st.expander("Show Algorithm Steps"):
                for name, lines in result.process_logs.items():
                    if lines:
                        st.markdown(f"**{name}**")
                        st.text("\n".join(lines))

# ---------- TAB 4: Daily Patterns ----------
with tab4:
    st.header("Patterns of the Previous Day")
    cleaned = st.session_state.get("cleaned_baskets")
    if not cleaned:
        st.warning("Need cleaned data first (Tab 2).")
    elif not any(b.date for b in cleaned):
        st.info("The uploaded CSV has no date column.")
    else:
        target = st.date_input("Target date", value=pd.Timestamp.today())
        if st.button("Analyze Previous Day"):
            try:
                config = AnalysisConfig(min_support, min_confidence, algorithm)
                daily = analyze_daily_patterns(cleaned, str(target), config)
            except InvalidInput as e:
                st.error(str(e))
            else:
                st.caption(f"{daily.transaction_count} transactions on {daily.previous_date}")
                if daily.result.is_empty:
                    st.warning(daily.result.message)
                else:
                    product_map = st.session_state.product_map
                    st.dataframe(daily.result.itemsets_frame(product_map))
                    st.dataframe(daily.result.rules_frame(product_map))
