"""
FitCoach function service for the FitCoach Access Layer.

The service fronts a mobile client with a handful of remote-callable
functions, each of which first requires an authenticated caller:
- geminiChat: generative-model chat with structured tool output
- apiNinjasSearchExercises: exercise-database lookup passthrough
- fs*: nutrition-database search, autocomplete and details

Structure:
- app.main: FastAPI app, callable routes, and wiring.
- app.identity: caller identity verification.
- app.nutrition: dual-protocol credential handling and food operations.
- app.gemini: generative-model client and tool declarations.
- app.exercises: exercise-database client.
"""
