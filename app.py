import os
import sys

# Ensure project root is in path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from loanmap.gradio_app import app, configure_logging, RECORDS_PATH, GEO_PATH

if __name__ == "__main__":
    configure_logging()
    print("Starting LoanMap...")
    print(f"Loan records: {RECORDS_PATH}")
    print(f"Boundaries:   {GEO_PATH}")
    print("Please check the console for the local URL (usually http://127.0.0.1:7860)")
    app.launch(inbrowser=True)
