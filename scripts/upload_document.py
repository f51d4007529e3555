"""Script to upload a document to the Aurora API and wait for its analysis."""

import sys
import os
from pathlib import Path

# Add the project root to sys.path to allow importing from 'core'
sys.path.append(os.getcwd())

from core.client import AuroraClient, UploadSession, UploadState, UploadWorkflow

BASE_URL = os.environ.get("AURORA_URL", "http://localhost:8000")
USER_ID = os.environ.get("AURORA_USER_ID", "local-dev")


def show_progress(session: UploadSession) -> None:
    stages = " → ".join(f"{stage.name} [{stage.status.value}]" for stage in session.stages)
    print(f"📊 {session.state.value}: {stages}")


def upload_document(file_path: str) -> None:
    path = Path(file_path)
    if not path.exists():
        print(f"❌ Error: File not found at {file_path}")
        return

    print(f"📤 Uploading {path.name} to {BASE_URL}...")
    client = AuroraClient(base_url=BASE_URL, user_id=USER_ID)
    workflow = UploadWorkflow(client, on_change=show_progress)

    try:
        session = workflow.start(path)
        if session.state is UploadState.FAILED:
            print(f"❌ Upload failed: {session.error}")
            print("💡 Make sure the server is running (uvicorn app.main:app --reload)")
            return

        print(f"🆔 Analysis ID: {session.analysis_id}")
        session = workflow.wait()
    except KeyboardInterrupt:
        print("\n⏹️  Stopped polling")
        return
    finally:
        workflow.stop()

    if session.state is UploadState.FAILED:
        print(f"❌ Analysis failed: {session.error}")
        return

    analysis = session.analysis or {}
    print("✅ Analysis complete!")
    print(f"⚖️  Risk: {analysis.get('risk_level')} ({analysis.get('risk_score')}/100)")
    print(f"📄 Contract type: {analysis.get('contract_type')}")
    print("\n📝 Summary:")
    print("-" * 50)
    print(analysis.get("plain_summary"))
    print("-" * 50)
    for clause in analysis.get("clauses", [])[:5]:
        print(f"  • [{clause['risk_level']}] {clause['text'][:100]}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/upload_document.py <path_to_document>")
    else:
        upload_document(sys.argv[1])
