"""
Streamlit front end for the PDF Quiz Extractor.
"""
