"""reelcompose — vertical reels with synchronized, styleable captions.

Cut a short clip out of a long source video, edit its timed captions
against a trim window, and export a 9:16 reel with the captions burned
in. Caption timing and animation are pure functions of time, so the
live preview and the frame-by-frame export agree at every timestamp.
"""
