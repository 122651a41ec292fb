"""Prompt templates for the generation capabilities."""

CLONE = (
    "You are an expert image editing assistant. Analyze the main graphic design in the provided image. "
    "Recreate an absolutely detailed, high-resolution, remove watermark, print-quality version of ONLY the "
    "central design elements. Faithfully reproduce all details, colors, and fonts. The final output MUST be "
    "on a solid, neutral, single-color background (like pure white #FFFFFF) to make background removal easy. "
    "Do NOT use a transparent background. IMPORTANT: Do not include any part of the original product "
    "(like a t-shirt or mug) or any background elements."
)

TRANSFORM = (
    "You are an expert image editing assistant. Analyze the main graphic design in the provided image. "
    "Reproduce an absolutely detailed, high resolution, watermark-free, print-quality version of ONLY the "
    "central design elements. Faithfully reproduce all details, colors and fonts. The final product MUST be "
    "printed on a solid, neutral, monochrome background (like pure white #FFFFFF) for easy background removal. "
    "IMPORTANT: Do not include any components of the original product (like a t-shirt or mug) or any "
    "background elements. Based on the user's instructions, completely transform the design in the provided "
    'image.\nUser Instructions: "{instructions}"'
)

REDESIGN = (
    "You are an expert design restoration specialist. The provided image is potentially low-quality, blurry, "
    "or old. Your task is to intelligently recognize and meticulously recreate the original, high-fidelity "
    "design.\n"
    "- Use your extensive knowledge to identify any logos, characters, text, or specific art styles, even if "
    "they are obscured. If you recognize a known design, recreate it with perfect accuracy.\n"
    "- If the design seems generic, infer the details and recreate it in a clean, sharp, print-quality style.\n"
    "- The final output MUST be on a solid, neutral, single-color background (like pure white #FFFFFF) to make "
    "background removal easy. Do NOT use a transparent background.\n"
    "- IMPORTANT: Do not include any part of the original product (like a t-shirt or mug) or any background "
    "elements.\n"
    "- If there are user instructions, apply them to the restored design.\n"
    'User Instructions: "{instructions}"'
)

REDESIGN_NO_INSTRUCTIONS = "No custom instructions provided. Focus on faithful restoration."

ANALYZE_COLOR = (
    "You are an expert image editing assistant. Analyze the image of a product with a graphic on it. "
    "Determine the dominant color of the product's material itself, ignoring the colors within the graphic "
    "design. Provide only the hex color code for this dominant background color. For example, if it's a black "
    "t-shirt with a white logo, you should return #000000. Your response must be only the hex code."
)

MOCKUP = (
    "Take the provided design and create a photorealistic mockup. {product_prompt}. IMPORTANT: The main color "
    "of the product (e.g., the t-shirt fabric, the mug's ceramic) MUST be the hex color: {color}. The design "
    "must be placed naturally on the product, conforming to its shape, texture, and lighting. The final image "
    "should look like a professional product photograph."
)

DETAILS = (
    "Analyze the provided design. Your task is to generate marketing copy for a print-on-demand product "
    "featuring this design."
)

INPAINT = (
    "RULE: You are a master graphic designer and style chameleon. Your ONLY task is to perform a generative "
    "inpainting operation with perfect stylistic matching.\n"
    "You will receive three inputs:\n"
    "1. A 'base image' that needs modification.\n"
    "2. A 'mask image'. The white area on this mask indicates the ONLY region on the 'base image' to be "
    "modified.\n"
    "3. A text 'instruction' describing the change.\n\n"
    "TASK:\n"
    "1. METICULOUSLY ANALYZE the 'base image' style surrounding the masked area. Match the font, text effects, "
    "colors, outlines, textures, lighting, and overall artistic style PERFECTLY.\n"
    "2. Apply the user's 'instruction' (\"{instructions}\") ONLY to the white area defined by the 'mask image'.\n"
    "3. The black area of the 'mask image' corresponds to the part of the 'base image' that MUST be preserved "
    "perfectly. ANY change outside the white mask is a CRITICAL FAILURE.\n"
    "4. Your output MUST be ONLY the final, edited image, with the exact same dimensions as the original "
    "'base image'. Do not add text or explanations."
)

REMIX = (
    "You are a professional photo editing assistant. Your task is to perform an inpainting operation.\n"
    "You will receive three images and a text instruction:\n"
    "1. A 'target image' which you need to edit.\n"
    "2. A 'source image' which contains the element or style to be added.\n"
    "3. A 'mask image'. The white area on this mask indicates the exact region on the 'target image' to be "
    "modified. The black area must remain untouched.\n\n"
    "Based on the user's instruction: \"{instructions}\", seamlessly blend the relevant part of the 'source "
    "image' into the white masked area of the 'target image'.\n\n"
    "IMPORTANT:\n"
    "- Maintain the original level of detail, lighting, and quality from the source images.\n"
    "- The output must be ONLY the final, edited 'target image', with the EXACT same dimensions.\n"
    "- Do not include the source image or the mask in the final output.\n"
    "- Do not add any text, watermarks, or explanations. Just return the modified image."
)

SEEDREAM_CLONE = CLONE.split("You are an expert image editing assistant. ", 1)[1]


def transform_prompt(instructions: str) -> str:
    return TRANSFORM.format(instructions=instructions)


def redesign_prompt(instructions: str) -> str:
    return REDESIGN.format(instructions=instructions.strip() or REDESIGN_NO_INSTRUCTIONS)


def mockup_prompt(product_prompt: str, color: str) -> str:
    return MOCKUP.format(product_prompt=product_prompt, color=color)


def inpaint_prompt(instructions: str) -> str:
    return INPAINT.format(instructions=instructions)


def remix_prompt(instructions: str) -> str:
    return REMIX.format(instructions=instructions)
