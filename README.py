"""
Test Case Platform API

FastAPI backend of a test-case management platform. Its core merges
AI-generated Gherkin scenarios and TypeScript step definitions into the
feature and step files of a Playwright BDD project without disturbing
existing content.

Architecture Overview:
- Repository pattern for project records (SQLAlchemy)
- Dependency Injection container in app/core/dependencies.py
- Stateless file analyzers in app/services/code_manipulation/

Usage:
1. Optionally create a .env file (see app/config/settings.py)
2. Install: pip install -e ".[test]"
3. Run the application: python main.py
4. Access API docs at: http://localhost:8000/api/v1/docs

API Endpoints:
- GET  /api/v1/health - Health check
- GET  /api/v1/health/readiness - Readiness check
- POST /api/v1/projects - Register a project and its workspace path
- GET/PUT/DELETE /api/v1/projects/{id}
- POST /api/v1/code-insertions/analyze - Compute insertion descriptors
- POST /api/v1/code-insertions/apply - Splice descriptors into files
- POST /api/v1/code-insertions/structure - Check artifact directories/files

Artifact layout inside a project workspace:
- src/features/<section>/<entity>.feature
- src/steps/<section>/<entity>.steps.ts
- src/fixtures/<section>/<entity>.fixture.ts
- src/schemas/<section>/<entity>.schema.ts
- src/types/<section>/<entity>.ts
- src/api/<section>/<entity>Client.ts

Step files may carry section comments that pin insertion points:

    // End of Given steps
    // Beginning of When steps
    // End of When steps
    // End of Then steps

Without them, a new step goes after the last step of the same keyword, or
at the end of the file.
"""
