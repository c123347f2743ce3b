# ------------------------
# Streamlit entry point: streamlit run streamlit_app.py
# The backend runs separately: uvicorn pdf_assistant.backend.main:app
# ------------------------
from pdf_assistant.frontend.app import main

main()
