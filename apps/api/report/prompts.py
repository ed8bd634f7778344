"""Instruction prompt for plant image analysis."""

ANALYSIS_PROMPT = """Analyze the uploaded plant image and provide a detailed response in plain text only (no markdown or formatting). Include the following in your analysis:

1. The most likely species or type of the plant.
2. The overall health condition of the plant and signs of any disease, deficiency, or stress.
3. Key physical characteristics that help identify the plant.
4. Step-by-step care instructions including watering, sunlight, soil, fertilizer, temperature, and pruning needs.
5. Important precautions to prevent disease, pests, or damage.
6. Any interesting facts, benefits, or traditional uses of the plant.

Give the response in clear, structured sentences with each section explained in detail."""

REPORT_TITLE = "Plant Analysis Report"
