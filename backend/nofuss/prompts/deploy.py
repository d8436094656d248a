"""
Deploy Helper Replies

Canned, keyword-routed answers for the deploy chat. The deploy
assistant does not call the completion service.
"""

VERCEL_REPLY = """
Great choice! Deploying to Vercel is super easy. Here's how to do it:

## Step 1: Create a GitHub repository
1. Go to [GitHub](https://github.com) and sign in (or create an account if you don't have one)
2. Click the "+" icon in the top-right corner and select "New repository"
3. Name your repository (for example, "{project_name}")
4. Choose "Public" (unless you want to keep your code private)
5. Click "Create repository"

## Step 2: Connect to Vercel
1. Go to [Vercel](https://vercel.com) and sign in with your GitHub account
2. Click "Add New..." and select "Project"
3. Find your GitHub repository in the list and click "Import"
4. Keep the default settings and click "Deploy"

That's it! Vercel will automatically build and deploy your site. When it's done, you'll get a URL where your site is live.

Would you like me to explain any of these steps in more detail?
"""

DOWNLOAD_REPLY = """
Downloading your project as a ZIP file is a great option! Here's how:

## Step 1: Download your project
1. Click the "Download ZIP" button at the top of this page
2. Save the ZIP file to your computer
3. Extract the ZIP file to a folder on your computer

## Step 2: Choose a hosting provider
There are many options for hosting your website:
- [Netlify](https://netlify.com) (free, beginner-friendly)
- [GitHub Pages](https://pages.github.com) (free for public repositories)
- [Cloudflare Pages](https://pages.cloudflare.com) (free, fast global CDN)

## Step 3: Upload your files
For example, with Netlify:
1. Go to [Netlify](https://netlify.com) and create an account
2. Click "Add new site" and select "Deploy manually"
3. Drag and drop your project folder onto the upload area
4. Wait for the upload to complete, and your site will be live!

Would you like more specific instructions for a particular hosting provider?
"""

COPY_PASTE_REPLY = """
The copy-paste option is perfect if you want to use the code elsewhere! Here's how:

## Step 1: Copy your code
Copy each file of "{project_name}" (index.html, styles.css, script.js and any others).

## Step 2: Set up locally
1. Create a new folder on your computer
2. Create the files and paste the code into them
3. Open the index.html file in your browser to test

## Step 3: Upload to any hosting
Once you're happy with your site, you can upload these files to any web hosting service.

Would you like me to explain how to set this up on a specific platform?
"""

DEFAULT_REPLY = """
I'm here to help you deploy your website "{project_name}"! Here are the options again:

## Option 1: Deploy with Vercel (Recommended for beginners)
This is the easiest option! Vercel is free and perfect for personal projects.

## Option 2: Download your project
I can help you download your entire project as a ZIP file and guide you through uploading it to any hosting service.

## Option 3: Copy the code
I can help you copy all the important code and provide simple setup instructions.

Which option would you like to learn more about? Or do you have a specific question about deploying your website?
"""

# First matching rule wins
REPLY_RULES = [
    (("vercel", "option 1", "github"), VERCEL_REPLY),
    (("download", "zip", "option 2"), DOWNLOAD_REPLY),
    (("copy", "paste", "option 3", "code"), COPY_PASTE_REPLY),
]


def deploy_helper_reply(user_message: str, project_name: str) -> str:
    """Pick the canned reply matching the user's question."""
    lowered = user_message.lower()
    for keywords, template in REPLY_RULES:
        if any(keyword in lowered for keyword in keywords):
            return template.format(project_name=project_name)
    return DEFAULT_REPLY.format(project_name=project_name)
