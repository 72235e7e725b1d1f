"""resume_text_cli.py
Print the sample resume as plain text from the command line, optionally scored
against a job description.
Example: `python resume_text_cli.py path/to/job_description.txt`
"""
import asyncio
import sys

from canvas_cv.ats.ats_analyzer import AnalysisOutcome, score_band
from canvas_cv.editor_session import EditorSession


def main():
    if len(sys.argv) > 2:
        print("Usage: python resume_text_cli.py [job_description_file]")
        sys.exit(1)

    session = EditorSession()
    store = session.store

    print("Resume Text:")
    print(store.get_resume_text())

    if len(sys.argv) < 2:
        return

    with open(sys.argv[1], "r", encoding="utf-8") as f:
        store.set_job_description(f.read())

    # Run the ATS analysis
    outcome = asyncio.run(session.analyzer.analyze())
    session.close()

    print("\nATS Analysis Result:")
    if outcome != AnalysisOutcome.SUCCESS:
        print(f"Analysis {outcome.value}.")
        sys.exit(1)

    analysis = store.ats_analysis
    print(f"Score: {analysis.score} ({score_band(analysis.score)})")
    print(f"Critical Issues: {', '.join(analysis.critical_issues) or 'None'}")
    print(f"Missing Keywords: {', '.join(analysis.missing_keywords) or 'None'}")
    print(f"Positive Feedback: {', '.join(analysis.positive_feedback) or 'None'}")


if __name__ == "__main__":
    main()
